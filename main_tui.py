#!/usr/bin/env python3
"""
Spire Stats - Main Application
Terminal viewer for Slay the Spire run history and per-character statistics.
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import (
    Header, Footer, Static, Button, Label,
    DataTable, Input
)
from textual.screen import ModalScreen
from textual.binding import Binding

from sts_stats import __version__
from sts_stats.config.settings import config_manager
from sts_stats.core.aggregator import calculate_character_stats
from sts_stats.core.data_manager import DataManager
from sts_stats.core.errors import RunsPathError
from sts_stats.models.character import Character
from sts_stats.models.run import CharacterStats, RunMetrics, RunsPathInfo
from sts_stats.utils.logger import setup_logger

STATS_COLUMNS = ("Character", "Runs", "Wins", "Win %", "Avg Score", "Avg Floor", "Max Floor", "Avg Deck", "Avg Relics")
RUN_COLUMNS = ("Character", "Result", "Floor", "Asc", "Score", "Deck", "Relics", "Killed By")


class CharacterStatsWidget(Static):
    """Widget displaying per-character aggregate stats."""

    def compose(self) -> ComposeResult:
        yield Label("Character Stats", classes="section-title")
        yield DataTable(id="stats-table")

    def update_stats(self, stats: List[CharacterStats]):
        table = self.query_one("#stats-table", DataTable)
        if not table.columns:
            table.add_columns(*STATS_COLUMNS)
        table.clear()

        for row in stats:
            table.add_row(
                row.display_name,
                str(row.total_runs),
                str(row.wins),
                f"{row.win_rate * 100:.1f}",
                f"{row.avg_score:.0f}",
                f"{row.avg_floor:.1f}",
                str(row.max_floor),
                f"{row.avg_deck_size:.1f}",
                f"{row.avg_relics:.1f}",
            )


class RunHistoryWidget(Static):
    """Widget displaying the run list."""

    def compose(self) -> ComposeResult:
        yield Label("Runs", classes="section-title", id="runs-title")
        yield DataTable(id="runs-table")

    def on_mount(self):
        table = self.query_one("#runs-table", DataTable)
        table.cursor_type = "row"

    def update_runs(self, runs: List[RunMetrics], title: str = "Runs"):
        self.query_one("#runs-title", Label).update(title)
        table = self.query_one("#runs-table", DataTable)
        if not table.columns:
            table.add_columns(*RUN_COLUMNS)
        table.clear()

        for run in runs:
            character = Character.from_name(run.character)
            table.add_row(
                character.display_name if character else run.character,
                "🏆 Win" if run.victory else "💀 Loss",
                str(run.floor_reached),
                str(run.ascension_level),
                str(run.score),
                str(run.deck_size),
                str(run.relic_count),
                run.killed_by or "",
            )


class RunsPathWidget(Static):
    """One-line status of the runs directory."""

    def update_info(self, info: RunsPathInfo, custom: Optional[Path] = None):
        if info.current_path is None:
            text = "Runs directory: not found (press C to configure)"
        else:
            source = "custom" if custom is not None and info.current_path == str(custom) else "auto-detected"
            text = f"Runs directory ({source}): {info.current_path}"
        self.update(text)


class RunsPathScreen(ModalScreen):
    """Modal for choosing the runs directory."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    CSS = """
    RunsPathScreen {
        align: center middle;
    }

    #path-dialog {
        width: 80%;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }

    .config-row {
        height: auto;
        margin: 1 0;
    }
    """

    def __init__(self, manager: DataManager):
        super().__init__()
        self.manager = manager

    def compose(self) -> ComposeResult:
        info = self.manager.get_runs_path_info()
        custom = self.manager.resolver.get_custom_path()
        with Container(id="path-dialog"):
            yield Label("Runs Directory", classes="section-title")
            yield Static(f"Auto-detected: {info.auto_detected_path or 'none'}")
            yield Input(
                value=str(custom or ''),
                placeholder="Path to SlayTheSpire/runs",
                id="path-input"
            )
            with Horizontal(classes="config-row"):
                yield Button("Save", id="save-btn", variant="success")
                yield Button("Use Auto-detect", id="clear-btn", variant="warning")
                yield Button("Cancel", id="cancel-btn", variant="default")

    def action_cancel(self) -> None:
        self.dismiss(False)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save-btn":
            self._save_path()
        elif event.button.id == "clear-btn":
            self.manager.clear_runs_path(persist=True)
            self.app.notify("Using auto-detected runs directory")
            self.dismiss(True)
        else:
            self.dismiss(False)

    def _save_path(self):
        path = self.query_one("#path-input", Input).value
        try:
            self.manager.set_runs_path(path, persist=True)
        except RunsPathError as e:
            self.app.notify(str(e), severity="error")
            return
        self.app.notify("Runs directory saved")
        self.dismiss(True)


class SpireStatsApp(App):
    """Main Spire Stats application."""

    CSS = """
    .section-title {
        background: $primary;
        color: $text;
        padding: 0 1;
        margin-bottom: 1;
    }

    #stats-widget {
        height: 12;
        border: solid $secondary;
        margin-bottom: 1;
    }

    #runs-widget {
        height: 1fr;
        border: solid $secondary;
    }

    #path-widget {
        height: 1;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("v", "toggle_victories", "Victories Only"),
        Binding("f", "cycle_character", "Filter Character"),
        Binding("e", "export", "Export"),
        Binding("c", "show_settings", "Runs Path"),
    ]

    TITLE = "Spire Stats"

    def __init__(self, manager: Optional[DataManager] = None):
        super().__init__()
        self.manager = manager or DataManager()
        self.victories_only = False
        self.character_filter: Optional[Character] = None

    def compose(self) -> ComposeResult:
        yield Header()

        with Vertical():
            yield RunsPathWidget(id="path-widget")
            yield CharacterStatsWidget(id="stats-widget")
            yield RunHistoryWidget(id="runs-widget")

        yield Footer()

    def on_mount(self):
        self._update_displays()

    def action_refresh(self):
        self._update_displays()
        self.notify("Run history reloaded")

    def action_toggle_victories(self):
        self.victories_only = not self.victories_only
        self._update_displays()

    def action_cycle_character(self):
        """Step the run filter through each character, then back to all."""
        characters = Character.all()
        if self.character_filter is None:
            self.character_filter = characters[0]
        else:
            index = characters.index(self.character_filter) + 1
            self.character_filter = characters[index] if index < len(characters) else None
        self._update_displays()

    def action_export(self):
        output = self.manager.export_to_file()
        if output is None:
            self.notify("Export failed, see log for details", severity="error")
        else:
            self.notify(f"Exported to {output}")

    def action_show_settings(self):
        def on_close(changed: Optional[bool]) -> None:
            if changed:
                self._update_displays()

        self.push_screen(RunsPathScreen(self.manager), on_close)

    def _runs_title(self, count: int) -> str:
        parts = [self.character_filter.display_name if self.character_filter else "All characters"]
        if self.victories_only:
            parts.append("victories only")
        return f"Runs ({count}) - {', '.join(parts)}"

    def _update_displays(self):
        """Reload runs from disk and refresh every widget."""
        runs = self.manager.load_all_runs()

        self.query_one(RunsPathWidget).update_info(
            self.manager.get_runs_path_info(), self.manager.resolver.get_custom_path()
        )
        self.query_one(CharacterStatsWidget).update_stats(calculate_character_stats(runs))

        visible = runs
        if self.character_filter is not None:
            visible = [r for r in visible if r.character == self.character_filter.dir_name]
        if self.victories_only:
            visible = [r for r in visible if r.victory]
        self.query_one(RunHistoryWidget).update_runs(visible, self._runs_title(len(visible)))


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Spire Stats - Slay the Spire run statistics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Configuration:
  Settings can be configured via:
  1. Command line options (highest priority)
  2. Runs path screen (C)
  3. Config file (~/.config/sts-stats/config.json)
  4. Defaults (lowest priority)

Examples:
  %(prog)s                                 # Run the viewer
  %(prog)s --runs-path ~/SlayTheSpire/runs # Use a specific runs directory
  %(prog)s --api                           # Also serve the HTTP API
  %(prog)s --serve --port 8080             # Serve the HTTP API only'''
    )
    parser.add_argument(
        '--runs-path',
        help='Runs directory for this session (not saved)'
    )
    parser.add_argument(
        '--api',
        action='store_true',
        help='Serve the HTTP API alongside the viewer'
    )
    parser.add_argument(
        '--serve',
        action='store_true',
        help='Serve the HTTP API without the viewer'
    )
    parser.add_argument(
        '--port',
        type=int,
        help='HTTP API port (default from config, 3030)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode with verbose logging'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'Spire Stats v{__version__}'
    )

    return parser.parse_args(argv)


def configure_logging(args, config) -> None:
    """Set up loguru sinks for the chosen mode."""
    level = "DEBUG" if args.debug else config.logging.level
    log_dir = str(config.get_logs_dir())

    if args.serve:
        setup_logger(level=level, log_dir=log_dir, console=True, file=config.logging.to_file)
    else:
        # Console output would draw over the TUI, so the file sink is the only one
        setup_logger(level=level, log_dir=log_dir, console=False, file=True)


def main(argv=None):
    """Run the main application."""
    args = parse_arguments(argv)
    config = config_manager.config
    configure_logging(args, config)

    manager = DataManager()
    if args.runs_path:
        try:
            manager.set_runs_path(args.runs_path)
        except RunsPathError as e:
            print(f"❌ {e}")
            sys.exit(2)

    port = args.port or config.api.port

    try:
        if args.serve:
            from sts_stats.api.server import start_server
            start_server(manager, host=config.api.host, port=port,
                         enable_cors=config.api.enable_cors)
            return

        if args.api:
            from sts_stats.api.server import start_server_in_thread
            start_server_in_thread(manager, host=config.api.host, port=port,
                                   enable_cors=config.api.enable_cors)

        SpireStatsApp(manager).run()
    except KeyboardInterrupt:
        print("\nExiting...")
    except Exception as e:
        print(f"Error starting application: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
