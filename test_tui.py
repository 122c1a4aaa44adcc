#!/usr/bin/env python3
"""
Test script for the terminal viewer.
"""
import asyncio

from textual.widgets import DataTable

from main_tui import SpireStatsApp, parse_arguments


def test_parse_arguments():
    args = parse_arguments(["--runs-path", "/tmp/runs", "--api", "--port", "4000"])
    assert args.runs_path == "/tmp/runs"
    assert args.api is True
    assert args.serve is False
    assert args.port == 4000


def test_app_shows_stats_and_filters(sample_runs, make_manager):
    app = SpireStatsApp(make_manager(sample_runs))

    async def run():
        async with app.run_test() as pilot:
            stats_table = app.query_one("#stats-table", DataTable)
            runs_table = app.query_one("#runs-table", DataTable)
            assert stats_table.row_count == 2
            assert runs_table.row_count == 4

            await pilot.press("v")
            assert runs_table.row_count == 2

            await pilot.press("f")
            assert app.character_filter is not None
            assert runs_table.row_count == 1

    asyncio.run(run())


def test_logging_follows_mode_and_config(monkeypatch, tmp_path):
    import main_tui
    from sts_stats.config.settings import Config

    calls = []
    monkeypatch.setattr(main_tui, "setup_logger", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setenv("STS_STATS_CONFIG_DIR", str(tmp_path))
    config = Config(logging={"to_file": True})

    main_tui.configure_logging(parse_arguments(["--serve"]), config)
    assert calls[-1]["console"] is True
    assert calls[-1]["file"] is True
    assert calls[-1]["log_dir"] == str(tmp_path / "logs")

    main_tui.configure_logging(parse_arguments(["--serve", "--debug"]), Config())
    assert calls[-1]["file"] is False
    assert calls[-1]["level"] == "DEBUG"

    main_tui.configure_logging(parse_arguments([]), Config())
    assert calls[-1]["console"] is False
    assert calls[-1]["file"] is True
