"""
Slay the Spire run file parser for extracting run metrics.
"""
import json
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, StrictBool, StrictStr, ValidationError, field_validator

from ..models.character import Character
from ..models.run import RunMetrics
from ..utils.logger import get_logger
from .card_classifier import count_card_types

log = get_logger()

RUN_FILE_SUFFIX = ".run"

# Starting HP used when a run has no per-floor HP history
DEFAULT_MAX_HP = 72

ELITE_ROOM = "E"
BOSS_ROOM = "BOSS"
SHOP_ROOM = "$"
REST_CHOICE = "REST"
SMITH_CHOICE = "SMITH"


def coerce_whole_number(value: Any) -> Optional[int]:
    """Accept an int or a float, truncating floats toward zero."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("expected a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("expected a finite number")
        return int(value)
    raise ValueError("expected a number")


class RawCampfireChoice(BaseModel):
    """One rest site decision."""
    key: Optional[StrictStr] = None


class RawDamageTaken(BaseModel):
    """One combat's damage record."""
    damage: Optional[int] = None

    @field_validator('damage', mode='before')
    @classmethod
    def coerce_damage(cls, v):
        return coerce_whole_number(v)


class RawRunFile(BaseModel):
    """The subset of a run file that metrics are derived from.

    Every field is optional. A present field with the wrong shape rejects
    the whole document.
    """
    play_id: Optional[StrictStr] = None
    floor_reached: Optional[int] = None
    victory: Optional[StrictBool] = None
    score: Optional[int] = None
    ascension_level: Optional[int] = None
    master_deck: Optional[List[StrictStr]] = None
    relics: Optional[List[StrictStr]] = None
    campfire_choices: Optional[List[RawCampfireChoice]] = None
    path_per_floor: Optional[List[Optional[StrictStr]]] = None
    items_purged: Optional[List[StrictStr]] = None
    items_purchased: Optional[List[StrictStr]] = None
    potions_floor_usage: Optional[List[Any]] = None
    damage_taken: Optional[List[RawDamageTaken]] = None
    max_hp_per_floor: Optional[List[Any]] = None
    killed_by: Optional[StrictStr] = None

    @field_validator('floor_reached', 'score', 'ascension_level', mode='before')
    @classmethod
    def coerce_numbers(cls, v):
        return coerce_whole_number(v)

    def final_max_hp(self) -> int:
        """HP recorded on the last floor, or the default starting HP."""
        if not self.max_hp_per_floor:
            return DEFAULT_MAX_HP
        last = self.max_hp_per_floor[-1]
        try:
            hp = coerce_whole_number(last)
        except ValueError:
            return DEFAULT_MAX_HP
        return DEFAULT_MAX_HP if hp is None else hp


class RunFileParser:
    """Parser for Slay the Spire ``.run`` files."""

    def __init__(self):
        self.files_parsed = 0
        self.files_skipped = 0

    def parse_file(self, file_path: Path, character: str) -> Optional[RunMetrics]:
        """Parse one run file, returning None if it cannot be used."""
        try:
            content = file_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            log.warning(f"Skipping unreadable run file {file_path}: {e}")
            self.files_skipped += 1
            return None

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            log.warning(f"Skipping malformed run file {file_path}: {e}")
            self.files_skipped += 1
            return None

        metrics = self.parse_document(data, character, fallback_id=file_path.stem)
        if metrics is None:
            log.warning(f"Skipping run file with unexpected fields: {file_path}")
            self.files_skipped += 1
        else:
            self.files_parsed += 1
        return metrics

    def parse_document(self, data: Any, character: str,
                       fallback_id: str = "unknown") -> Optional[RunMetrics]:
        """Convert a decoded run document into metrics."""
        if not isinstance(data, dict):
            return None

        try:
            raw = RawRunFile(**data)
        except ValidationError as e:
            log.debug(f"Run document failed validation: {e.error_count()} error(s)")
            return None

        master_deck = raw.master_deck or []
        relics = raw.relics or []
        path_per_floor = raw.path_per_floor or []
        campfire_choices = raw.campfire_choices or []
        damage_taken = raw.damage_taken or []

        attack_count, skill_count, power_count = count_card_types(master_deck)

        return RunMetrics(
            play_id=raw.play_id if raw.play_id is not None else fallback_id,
            character=character,
            floor_reached=raw.floor_reached or 0,
            victory=bool(raw.victory),
            score=raw.score or 0,
            ascension_level=raw.ascension_level or 0,
            deck_size=len(master_deck),
            attack_count=attack_count,
            skill_count=skill_count,
            power_count=power_count,
            upgraded_cards=sum(1 for card in master_deck if '+' in card),
            cards_removed=len(raw.items_purged or []),
            relic_count=len(relics),
            relics=relics,
            master_deck=master_deck,
            elites_killed=path_per_floor.count(ELITE_ROOM),
            bosses_killed=path_per_floor.count(BOSS_ROOM),
            campfires_rested=sum(1 for c in campfire_choices if c.key == REST_CHOICE),
            campfires_upgraded=sum(1 for c in campfire_choices if c.key == SMITH_CHOICE),
            shops_visited=path_per_floor.count(SHOP_ROOM),
            cards_purchased=len(raw.items_purchased or []),
            potions_used=len(raw.potions_floor_usage or []),
            total_damage_taken=sum(d.damage for d in damage_taken if d.damage is not None),
            max_hp_at_end=raw.final_max_hp(),
            killed_by=raw.killed_by,
        )

    def load_directory(self, runs_root: Path) -> List[RunMetrics]:
        """Parse every run under ``<runs_root>/<CHARACTER>/*.run``.

        Characters are visited in canonical order and files by name, so the
        result order is stable. Files that fail to parse are skipped.
        """
        runs: List[RunMetrics] = []

        for character in Character.all():
            char_dir = runs_root / character.dir_name
            if not char_dir.is_dir():
                continue

            try:
                entries = sorted(char_dir.iterdir())
            except OSError as e:
                log.warning(f"Cannot list {char_dir}: {e}")
                continue

            for file_path in entries:
                if file_path.suffix != RUN_FILE_SUFFIX or not file_path.is_file():
                    continue
                metrics = self.parse_file(file_path, character.dir_name)
                if metrics is not None:
                    runs.append(metrics)

        log.debug(f"Loaded {len(runs)} runs from {runs_root} ({self.files_skipped} skipped)")
        return runs


def parse_run_file(file_path: Path, character: str) -> Optional[RunMetrics]:
    """Parse a single run file."""
    return RunFileParser().parse_file(Path(file_path), character)


def load_runs_from_directory(runs_root: Path) -> List[RunMetrics]:
    """Load all runs below a runs directory."""
    return RunFileParser().load_directory(Path(runs_root))


def create_mock_run_data(**overrides: Any) -> Dict[str, Any]:
    """Create a realistic run document for testing."""
    data: Dict[str, Any] = {
        "play_id": "3b8f2c5e-0d7a-4a51-9c1e-7f6b2a9d4e10",
        "floor_reached": 33,
        "victory": False,
        "score": 412,
        "ascension_level": 5,
        "master_deck": [
            "Strike_R", "Strike_R", "Strike_R", "Strike_R+1",
            "Defend_R", "Defend_R", "Defend_R+1",
            "Bash", "Shrug It Off", "Inflame", "Demon Form",
        ],
        "relics": ["Burning Blood", "Vajra", "Bag of Marbles"],
        "campfire_choices": [
            {"data": "Bash", "floor": 6.0, "key": "SMITH"},
            {"floor": 15.0, "key": "REST"},
            {"floor": 24.0, "key": "REST"},
        ],
        "path_per_floor": [
            "M", "M", "?", "$", "E", "R", "M", "T", "E", "M",
            "R", "M", "?", "M", "R", "BOSS", None, "M", "E", "$",
        ],
        "items_purged": ["Strike_R"],
        "items_purchased": ["Shrug It Off", "Vajra"],
        "potions_floor_usage": [5, 16, 29],
        "damage_taken": [
            {"damage": 6.0, "enemies": "Jaw Worm", "floor": 1.0, "turns": 3.0},
            {"damage": 14.0, "enemies": "Gremlin Nob", "floor": 5.0, "turns": 4.0},
            {"enemies": "2 Louse", "floor": 7.0, "turns": 2.0},
            {"damage": 31, "enemies": "The Guardian", "floor": 16.0, "turns": 7.0},
        ],
        "max_hp_per_floor": [80, 80, 80, 80, 80, 82, 82, 82],
        "killed_by": "Book of Stabbing",
    }
    data.update(overrides)
    return data
