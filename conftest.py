"""
Shared fixtures: temporary runs directories filled with run files.
"""
import json
from pathlib import Path

import pytest

from sts_stats.config.runs_path import RunsPathResolver
from sts_stats.config.settings import ConfigManager
from sts_stats.core.data_manager import DataManager


def write_run(runs_root: Path, character: str, name: str, data) -> Path:
    """Write one run document to ``<runs_root>/<character>/<name>.run``."""
    char_dir = runs_root / character
    char_dir.mkdir(parents=True, exist_ok=True)
    run_file = char_dir / f"{name}.run"
    if isinstance(data, str):
        run_file.write_text(data, encoding='utf-8')
    else:
        run_file.write_text(json.dumps(data), encoding='utf-8')
    return run_file


@pytest.fixture
def runs_root(tmp_path):
    root = tmp_path / "runs"
    root.mkdir()
    return root


@pytest.fixture
def settings(tmp_path):
    return ConfigManager(config_file=tmp_path / "config" / "config.json")


@pytest.fixture
def make_manager(settings):
    """Build a DataManager whose only auto-detect candidate is ``runs_root``."""
    def _make(runs_root: Path, custom_path=None) -> DataManager:
        resolver = RunsPathResolver(custom_path=custom_path, candidates=[runs_root])
        return DataManager(resolver=resolver, settings=settings)
    return _make


@pytest.fixture
def sample_runs(runs_root):
    """Three Ironclad runs, one Silent run, nothing for Defect or Watcher."""
    write_run(runs_root, "IRONCLAD", "1001", {
        "play_id": "ic-1", "victory": True, "floor_reached": 51, "score": 1200,
        "ascension_level": 10, "master_deck": ["Strike_R", "Defend_R", "Bash", "Inflame"],
        "relics": ["Burning Blood", "Vajra"],
    })
    write_run(runs_root, "IRONCLAD", "1002", {
        "play_id": "ic-2", "victory": False, "floor_reached": 20, "score": 300,
        "ascension_level": 3, "master_deck": ["Strike_R", "Defend_R"],
        "relics": ["Burning Blood"], "killed_by": "Gremlin Nob",
    })
    write_run(runs_root, "IRONCLAD", "1003", {
        "play_id": "ic-3", "victory": False, "floor_reached": 33, "score": 600,
        "ascension_level": 10, "master_deck": ["Strike_R", "Defend_R", "Anger"],
        "relics": ["Burning Blood", "Anchor", "Lantern"], "killed_by": "The Champ",
    })
    write_run(runs_root, "THE_SILENT", "2001", {
        "play_id": "si-1", "victory": True, "floor_reached": 56, "score": 1500,
        "ascension_level": 20, "master_deck": ["Strike_G", "Neutralize", "Survivor"],
        "relics": ["Ring of the Snake"],
    })
    return runs_root
