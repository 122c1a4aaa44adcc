"""
Resolution of the directory holding Slay the Spire run files.
"""
import os
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple, Union

from ..core.errors import RunsPathError
from ..utils.logger import get_logger
from ..utils.rwlock import ReadWriteLock
from .settings import default_runs_paths

log = get_logger()

PathLike = Union[str, os.PathLike]


def auto_detect_runs_directory(candidates: Optional[Iterable[Path]] = None) -> Optional[Path]:
    """Return the first existing candidate directory."""
    if candidates is None:
        candidates = default_runs_paths()
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def resolve_runs_directory(custom: Optional[Path],
                           candidates: Optional[Iterable[Path]] = None) -> Optional[Path]:
    """Pick the runs directory: a valid custom path, else auto-detection.

    A custom path that no longer exists is reported and skipped for this
    lookup only. ``None`` means no run data is available.
    """
    if custom is not None:
        if custom.exists():
            return custom
        log.warning(f"Custom runs path does not exist: {custom}")

    return auto_detect_runs_directory(candidates)


class RunsPathResolver:
    """Holds the user-selected runs directory and resolves the effective one.

    The custom path is the only mutable state shared between requests, so
    it is guarded by a reader/writer lock.
    """

    def __init__(self, custom_path: Optional[PathLike] = None,
                 candidates: Optional[Sequence[Path]] = None):
        self._lock = ReadWriteLock()
        self._custom_path: Optional[Path] = Path(custom_path) if custom_path else None
        self._candidates = list(candidates) if candidates is not None else None

    @property
    def candidates(self) -> Sequence[Path]:
        if self._candidates is None:
            return default_runs_paths()
        return self._candidates

    def get_custom_path(self) -> Optional[Path]:
        with self._lock.read_locked():
            return self._custom_path

    def set_custom_path(self, path: PathLike) -> Path:
        """Set the custom runs directory.

        Raises:
            RunsPathError: If the path does not exist or is not a directory.
                The previous custom path is kept.
        """
        path_str = os.fspath(path).strip() if path is not None else ""
        if not path_str:
            raise RunsPathError("Path must not be empty", path_str)

        new_path = Path(os.path.expanduser(path_str))
        if not new_path.exists():
            raise RunsPathError(f"Path does not exist: {path_str}", path_str)
        if not new_path.is_dir():
            raise RunsPathError(f"Path is not a directory: {path_str}", path_str)

        with self._lock.write_locked():
            self._custom_path = new_path
        log.info(f"Custom runs path set to {new_path}")
        return new_path

    def clear_custom_path(self) -> None:
        """Forget the custom path and fall back to auto-detection."""
        with self._lock.write_locked():
            previous, self._custom_path = self._custom_path, None
        if previous is not None:
            log.info(f"Custom runs path cleared (was {previous})")

    def auto_detect(self) -> Optional[Path]:
        return auto_detect_runs_directory(self.candidates)

    def resolve(self) -> Optional[Path]:
        """Effective runs directory for one lookup."""
        return resolve_runs_directory(self.get_custom_path(), self.candidates)

    def describe_configuration(self) -> Tuple[Optional[Path], bool, Optional[Path]]:
        """Report ``(current, is_custom, auto_detected)``.

        ``current`` is the custom path when it exists, otherwise the
        auto-detected directory.
        """
        custom = self.get_custom_path()
        auto_detected = self.auto_detect()
        if custom is not None and custom.exists():
            current = custom
        else:
            current = auto_detected
        return current, custom is not None, auto_detected
