"""
Data models for run metrics and aggregated statistics.
"""
from .character import Character
from .run import CharacterStats, ExportData, RunMetrics, RunsPathInfo

__all__ = [
    "Character",
    "CharacterStats",
    "ExportData",
    "RunMetrics",
    "RunsPathInfo",
]
