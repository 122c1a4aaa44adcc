"""
Run metrics, per-character statistics and export snapshot models.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RunMetrics(BaseModel):
    """Metrics extracted from a single run file."""
    model_config = ConfigDict(frozen=True)

    play_id: str = Field(..., description="Run identifier, or the file name if the run has none")
    character: str = Field(..., description="Character directory identifier, e.g. IRONCLAD")
    floor_reached: int = 0
    victory: bool = False
    score: int = 0
    ascension_level: int = 0

    # Deck composition
    deck_size: int = 0
    attack_count: int = 0
    skill_count: int = 0
    power_count: int = 0  # Remainder of the deck, may be negative
    upgraded_cards: int = 0
    cards_removed: int = 0

    # Progression
    relic_count: int = 0
    relics: List[str] = Field(default_factory=list)
    master_deck: List[str] = Field(default_factory=list)
    elites_killed: int = 0
    bosses_killed: int = 0
    campfires_rested: int = 0
    campfires_upgraded: int = 0
    shops_visited: int = 0
    cards_purchased: int = 0
    potions_used: int = 0

    # Combat
    total_damage_taken: int = 0
    max_hp_at_end: int = 72

    killed_by: Optional[str] = None


class CharacterStats(BaseModel):
    """Aggregated statistics for one character."""
    model_config = ConfigDict(frozen=True)

    character: str
    display_name: str
    total_runs: int = 0
    wins: int = 0
    win_rate: float = Field(0.0, ge=0.0, le=1.0, description="Fraction of runs won")
    avg_score: float = 0.0
    avg_floor: float = 0.0
    max_floor: int = 0
    avg_deck_size: float = 0.0
    avg_relics: float = 0.0

    @property
    def losses(self) -> int:
        return self.total_runs - self.wins


class ExportData(BaseModel):
    """Point-in-time snapshot of every run and its aggregate."""
    runs: List[RunMetrics] = Field(default_factory=list)
    character_stats: List[CharacterStats] = Field(default_factory=list)
    export_timestamp: int = Field(..., description="Seconds since the epoch")


class RunsPathInfo(BaseModel):
    """Runs directory configuration as reported to callers."""
    current_path: Optional[str] = Field(None, description="Custom path if set and valid, otherwise auto-detected")
    is_custom: bool = Field(False, description="Whether a custom path is configured")
    auto_detected_path: Optional[str] = None
    path_exists: bool = False
