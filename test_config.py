#!/usr/bin/env python3
"""
Test script for configuration and runs directory resolution.
"""
import threading

import pytest
from pydantic import ValidationError

from sts_stats.config.runs_path import (
    RunsPathResolver, auto_detect_runs_directory, resolve_runs_directory
)
from sts_stats.config.settings import ApiConfig, Config, ConfigManager, RunsConfig, default_runs_paths
from sts_stats.core.errors import RunsPathError
from sts_stats.utils.rwlock import ReadWriteLock


def test_default_config():
    config = Config()
    assert config.api.host == "127.0.0.1"
    assert config.api.port == 3030
    assert config.runs.custom_path is None
    assert config.runs.auto_detect is True
    assert config.logging.level == "INFO"


def test_config_dir_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("STS_STATS_CONFIG_DIR", str(tmp_path / "cfg"))
    config = Config()
    assert config.get_config_file() == tmp_path / "cfg" / "config.json"
    assert config.get_exports_dir() == tmp_path / "cfg" / "exports"


def test_config_validation():
    with pytest.raises(ValidationError):
        ApiConfig(host="0.0.0.0")
    with pytest.raises(ValidationError):
        ApiConfig(port=0)
    assert RunsConfig(custom_path="   ").custom_path is None


def test_config_manager_round_trip(settings):
    settings.update(**{"runs.custom_path": "/data/sts/runs", "api.port": 4040})
    assert settings.config_file.exists()

    reloaded = ConfigManager(config_file=settings.config_file)
    assert reloaded.config.runs.custom_path == "/data/sts/runs"
    assert reloaded.config.api.port == 4040


def test_config_manager_bad_file_uses_defaults(settings):
    settings.config_file.parent.mkdir(parents=True)
    settings.config_file.write_text("{broken")
    assert settings.load() == Config()


def test_search_paths_order(settings, tmp_path):
    settings.update(**{"runs.search_paths": [str(tmp_path / "extra")]})
    paths = settings.get_runs_search_paths()
    assert paths[:3] == default_runs_paths()
    assert paths[-1] == tmp_path / "extra"

    settings.update(**{"runs.auto_detect": False})
    assert settings.get_runs_search_paths() == [tmp_path / "extra"]


# --- Runs directory resolution ---

def test_auto_detect_returns_first_existing(tmp_path):
    first, second = tmp_path / "a", tmp_path / "b"
    second.mkdir()
    assert auto_detect_runs_directory([first, second]) == second
    first.mkdir()
    assert auto_detect_runs_directory([first, second]) == first
    assert auto_detect_runs_directory([tmp_path / "missing"]) is None


def test_resolve_prefers_existing_custom(tmp_path):
    custom, auto = tmp_path / "custom", tmp_path / "auto"
    custom.mkdir()
    auto.mkdir()
    assert resolve_runs_directory(custom, [auto]) == custom


def test_resolve_falls_back_when_custom_missing(tmp_path):
    auto = tmp_path / "auto"
    auto.mkdir()
    assert resolve_runs_directory(tmp_path / "gone", [auto]) == auto
    assert resolve_runs_directory(tmp_path / "gone", []) is None


def test_resolver_keeps_missing_custom_path(tmp_path):
    """A vanished custom path stays configured but is not used."""
    custom, auto = tmp_path / "custom", tmp_path / "auto"
    custom.mkdir()
    auto.mkdir()
    resolver = RunsPathResolver(candidates=[auto])
    resolver.set_custom_path(custom)
    custom.rmdir()

    assert resolver.get_custom_path() == custom
    assert resolver.resolve() == auto
    assert resolver.describe_configuration() == (auto, True, auto)


def test_set_custom_path_rejects_missing_directory(tmp_path):
    good = tmp_path / "good"
    good.mkdir()
    resolver = RunsPathResolver(candidates=[])
    resolver.set_custom_path(good)

    with pytest.raises(RunsPathError, match="does not exist"):
        resolver.set_custom_path(tmp_path / "nope")
    assert resolver.get_custom_path() == good


def test_set_custom_path_rejects_file(tmp_path):
    a_file = tmp_path / "file.run"
    a_file.write_text("{}")
    resolver = RunsPathResolver(candidates=[])
    with pytest.raises(RunsPathError, match="not a directory"):
        resolver.set_custom_path(a_file)
    with pytest.raises(RunsPathError):
        resolver.set_custom_path("  ")
    assert resolver.get_custom_path() is None


def test_clear_custom_path(tmp_path):
    resolver = RunsPathResolver(custom_path=tmp_path, candidates=[])
    assert resolver.describe_configuration() == (tmp_path, True, None)
    resolver.clear_custom_path()
    assert resolver.describe_configuration() == (None, False, None)


def test_rwlock_readers_share_writers_exclude():
    lock = ReadWriteLock()
    lock.acquire_read()
    lock.acquire_read()

    acquired = threading.Event()

    def writer():
        with lock.write_locked():
            acquired.set()

    thread = threading.Thread(target=writer)
    thread.start()
    assert not acquired.wait(0.1)

    lock.release_read()
    lock.release_read()
    assert acquired.wait(2)
    thread.join(2)


def test_reset_to_defaults(settings):
    settings.update(**{"api.port": 4040, "runs.auto_detect": False})
    settings.reset_to_defaults()

    assert settings.config == Config()
    assert ConfigManager(config_file=settings.config_file).config == Config()
