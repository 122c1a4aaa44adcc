"""
Keyword based card type classification.

Run files only store card ids, so card types are guessed from the card
name. The attack and skill checks are independent: a card matching both
keyword lists counts once as an attack and once as a skill.
"""
from enum import Enum
from typing import Iterable, Tuple


class CardType(str, Enum):
    """Card categories tracked in deck composition."""
    ATTACK = "Attack"
    SKILL = "Skill"
    POWER = "Power"


ATTACK_KEYWORDS = (
    "strike",
    "bash",
    "anger",
    "cleave",
    "carnage",
    "eruption",
    "flying",
    "tantrum",
    "ragnarok",
    "conclude",
    "claw",
    "beam",
    "core",
    "doom",
    "electro",
    "ftl",
    "hyperbeam",
    "meteor",
    "rip",
    "sunder",
    "bludgeon",
    "sword",
    "shiv",
    "dagger",
    "slice",
    "neutralize",
    "riddle",
    "skewer",
    "grand finale",
    "glass knife",
    "backstab",
    "predator",
    "all-out",
    "ball lightning",
    "cold snap",
    "compile",
    "barrage",
    "blizzard",
)

SKILL_KEYWORDS = (
    "defend",
    "armament",
    "shrug",
    "true grit",
    "vigilance",
    "protect",
    "survivor",
    "dodge",
    "blur",
    "footwork",
    "charge",
    "coolhead",
    "glacier",
    "leap",
    "stack",
    "turbo",
    "entrench",
    "impervious",
)


def _matches(card_name: str, keywords: Tuple[str, ...]) -> bool:
    lower = card_name.lower()
    return any(keyword in lower for keyword in keywords)


def is_attack(card_name: str) -> bool:
    return _matches(card_name, ATTACK_KEYWORDS)


def is_skill(card_name: str) -> bool:
    return _matches(card_name, SKILL_KEYWORDS)


def classify(card_name: str) -> CardType:
    """Classify a single card; attack keywords are checked first."""
    if is_attack(card_name):
        return CardType.ATTACK
    if is_skill(card_name):
        return CardType.SKILL
    return CardType.POWER


def count_card_types(deck: Iterable[str]) -> Tuple[int, int, int]:
    """Return ``(attacks, skills, powers)`` for a deck.

    Powers are whatever is left after attacks and skills, so a card
    matching both keyword lists can push the power count below zero.
    """
    cards = list(deck)
    attacks = sum(1 for card in cards if is_attack(card))
    skills = sum(1 for card in cards if is_skill(card))
    return attacks, skills, len(cards) - attacks - skills
