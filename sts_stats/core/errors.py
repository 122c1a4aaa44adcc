"""
Errors surfaced to callers of the run statistics services.
"""
from typing import List, Optional


class StsStatsError(Exception):
    """Base error for run statistics operations."""
    pass


class RunsPathError(StsStatsError, ValueError):
    """A runs directory could not be configured."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class CharacterNotFoundError(StsStatsError, LookupError):
    """A by-character query matched nothing.

    ``valid_characters`` is filled when the name is not a known character at
    all, and left empty when the character is known but has no runs.
    """

    def __init__(self, character: str, valid_characters: Optional[List[str]] = None):
        self.character = character
        self.valid_characters = list(valid_characters or [])
        if self.valid_characters:
            message = f"Character not found: {character}"
        else:
            message = f"No runs found for character: {character}"
        super().__init__(message)

    @property
    def is_unknown_character(self) -> bool:
        return bool(self.valid_characters)

    @property
    def details(self) -> Optional[str]:
        if self.valid_characters:
            return f"Valid characters: {', '.join(self.valid_characters)}"
        return None
