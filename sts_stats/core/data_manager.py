"""
Run history queries shared by the HTTP API, the TUI and the CLI tools.
"""
from pathlib import Path
from typing import Dict, List, Optional

from ..config.runs_path import PathLike, RunsPathResolver
from ..config.settings import ConfigManager, config_manager
from ..models.character import Character
from ..models.run import CharacterStats, ExportData, RunMetrics, RunsPathInfo
from ..parsers.run_parser import RunFileParser
from ..utils.logger import get_logger
from .aggregator import build_export, calculate_character_stats
from .errors import CharacterNotFoundError

log = get_logger()


class DataManager:
    """Loads runs from the resolved runs directory and answers queries.

    Nothing is cached: every query rescans the directory so new runs show
    up immediately.
    """

    def __init__(self, resolver: Optional[RunsPathResolver] = None,
                 settings: Optional[ConfigManager] = None):
        self.settings = settings or config_manager
        if resolver is None:
            custom_path = self.settings.config.runs.custom_path
            if custom_path and not Path(custom_path).is_dir():
                log.warning(f"Saved runs path is not a directory, ignoring: {custom_path}")
                custom_path = None
            resolver = RunsPathResolver(
                custom_path=custom_path,
                candidates=self.settings.get_runs_search_paths(),
            )
        self.resolver = resolver

    def load_all_runs(self) -> List[RunMetrics]:
        """Parse every readable run; an unresolvable directory yields no runs."""
        runs_path = self.resolver.resolve()
        if runs_path is None:
            log.warning("Could not find Slay the Spire runs directory")
            return []
        return RunFileParser().load_directory(runs_path)

    def get_runs(self, character: Optional[str] = None,
                 victories_only: bool = False,
                 min_ascension: Optional[int] = None) -> List[RunMetrics]:
        """All runs, optionally filtered by character, victory and ascension."""
        runs = self.load_all_runs()

        if character:
            wanted = character.strip().lower()
            runs = [r for r in runs if r.character.lower() == wanted]

        if victories_only:
            runs = [r for r in runs if r.victory]

        if min_ascension is not None:
            runs = [r for r in runs if r.ascension_level >= min_ascension]

        return runs

    def get_character_runs(self, name: str) -> List[RunMetrics]:
        """Runs for one character.

        Raises:
            CharacterNotFoundError: If ``name`` is not a known character.
        """
        character = Character.from_name(name)
        if character is None:
            raise CharacterNotFoundError(name, Character.ids())
        return [r for r in self.load_all_runs() if r.character == character.dir_name]

    def get_stats(self) -> List[CharacterStats]:
        return calculate_character_stats(self.load_all_runs())

    def get_character_stats(self, name: str) -> CharacterStats:
        """Stats for one character.

        Raises:
            CharacterNotFoundError: If the character is unknown or has no runs.
        """
        character = Character.from_name(name)
        if character is None:
            raise CharacterNotFoundError(name, Character.ids())

        for stats in self.get_stats():
            if stats.character == character.dir_name:
                return stats
        raise CharacterNotFoundError(name)

    def get_export(self) -> ExportData:
        return build_export(self.load_all_runs())

    def export_to_file(self, output_file: Optional[Path] = None) -> Optional[Path]:
        """Write an export snapshot as JSON and return its path."""
        export = self.get_export()
        if output_file is None:
            exports_dir = self.settings.config.get_exports_dir()
            output_file = exports_dir / f"sts_export_{export.export_timestamp}.json"

        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(export.model_dump_json(indent=2), encoding='utf-8')
        except OSError as e:
            log.error(f"Error exporting run data to {output_file}: {e}")
            return None

        log.info(f"Exported {len(export.runs)} runs to {output_file}")
        return output_file

    def get_characters(self) -> List[Dict[str, str]]:
        return [{"id": c.dir_name, "name": c.display_name} for c in Character.all()]

    def count_runs_by_character(self) -> Dict[str, int]:
        """Number of parsed runs per character, including characters with none."""
        counts = {character_id: 0 for character_id in Character.ids()}
        for run in self.load_all_runs():
            counts[run.character] = counts.get(run.character, 0) + 1
        return counts

    def get_runs_path_info(self) -> RunsPathInfo:
        current, is_custom, auto_detected = self.resolver.describe_configuration()
        return RunsPathInfo(
            current_path=str(current) if current is not None else None,
            is_custom=is_custom,
            auto_detected_path=str(auto_detected) if auto_detected is not None else None,
            path_exists=current is not None and current.exists(),
        )

    def set_runs_path(self, path: PathLike, persist: bool = False) -> RunsPathInfo:
        """Use a custom runs directory.

        Raises:
            RunsPathError: If the path is missing or not a directory.
        """
        new_path = self.resolver.set_custom_path(path)
        if persist:
            self.settings.update(**{"runs.custom_path": str(new_path)})
        return self.get_runs_path_info()

    def clear_runs_path(self, persist: bool = False) -> RunsPathInfo:
        """Revert to auto-detection."""
        self.resolver.clear_custom_path()
        if persist:
            self.settings.update(**{"runs.custom_path": None})
        return self.get_runs_path_info()


# Global data manager instance
data_manager = DataManager()
