"""
Aggregation functions that turn parsed runs into per-character stats.

No I/O, no side effects apart from reading the clock in build_export.
"""

import time
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.character import Character
from ..models.run import CharacterStats, ExportData, RunMetrics


def _mean(values: Sequence[int]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def group_runs_by_character(runs: Iterable[RunMetrics]) -> Dict[str, List[RunMetrics]]:
    """Group runs by their exact character identifier."""
    groups: Dict[str, List[RunMetrics]] = defaultdict(list)
    for run in runs:
        groups[run.character].append(run)
    return groups


def summarize_character(character: Character, runs: Sequence[RunMetrics]) -> CharacterStats:
    """Compute the stats row for one character's runs."""
    total = len(runs)
    wins = sum(1 for run in runs if run.victory)
    floors = [run.floor_reached for run in runs]

    return CharacterStats(
        character=character.dir_name,
        display_name=character.display_name,
        total_runs=total,
        wins=wins,
        win_rate=wins / total if total else 0.0,
        avg_score=_mean([run.score for run in runs]),
        avg_floor=_mean(floors),
        max_floor=max(floors) if floors else 0,
        avg_deck_size=_mean([run.deck_size for run in runs]),
        avg_relics=_mean([run.relic_count for run in runs]),
    )


def calculate_character_stats(runs: Iterable[RunMetrics]) -> List[CharacterStats]:
    """Per-character stats in canonical character order.

    Characters without runs get no row.
    """
    groups = group_runs_by_character(runs)

    stats = []
    for character in Character.all():
        char_runs = groups.get(character.dir_name)
        if char_runs:
            stats.append(summarize_character(character, char_runs))
    return stats


def build_export(runs: Iterable[RunMetrics], timestamp: Optional[int] = None) -> ExportData:
    """Bundle runs, their stats and a capture time into one snapshot."""
    run_list = list(runs)
    return ExportData(
        runs=run_list,
        character_stats=calculate_character_stats(run_list),
        export_timestamp=int(time.time()) if timestamp is None else timestamp,
    )
