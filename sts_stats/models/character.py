"""
Slay the Spire playable characters.
"""
from enum import Enum
from typing import List, Optional


class Character(str, Enum):
    """Playable characters, valued by their run-history directory name."""
    IRONCLAD = "IRONCLAD"
    THE_SILENT = "THE_SILENT"
    DEFECT = "DEFECT"
    WATCHER = "WATCHER"

    @classmethod
    def all(cls) -> List["Character"]:
        """All characters in canonical order."""
        return list(cls)

    @classmethod
    def ids(cls) -> List[str]:
        """Directory identifiers of all characters in canonical order."""
        return [character.dir_name for character in cls]

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["Character"]:
        """Look up a character by identifier, ignoring case."""
        if not name:
            return None
        wanted = name.strip().upper()
        for character in cls:
            if character.value == wanted:
                return character
        return None

    @property
    def dir_name(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Character.IRONCLAD: "Ironclad",
    Character.THE_SILENT: "Silent",
    Character.DEFECT: "Defect",
    Character.WATCHER: "Watcher",
}
