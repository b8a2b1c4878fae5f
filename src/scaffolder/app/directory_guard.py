"""Safety checks before scaffolding into an existing directory."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable

from scaffolder.ports.prompter import Prompter

IGNORED_ENTRIES = frozenset({"node_modules"})

CONTINUE_MESSAGE = "The current directory is not empty. Continue creating the project here?"
ERASE_MESSAGE = "Erase all contents of the current directory?"


def is_empty_listing(names: Iterable[str]) -> bool:
    """Hidden entries and dependency caches do not count as content."""
    return not [name for name in names if not name.startswith(".") and name not in IGNORED_ENTRIES]


def empty_directory(path: Path) -> None:
    """Remove every entry below ``path`` and keep the directory itself."""
    for entry in path.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


class DirectorySafetyGuard:
    def __init__(self, prompter: Prompter) -> None:
        self._prompter = prompter

    def is_empty(self, path: Path) -> bool:
        if not path.exists():
            return True
        return is_empty_listing(entry.name for entry in path.iterdir())

    def check(self, path: Path, *, force: bool = False) -> bool:
        """Return False when the user declines to scaffold into ``path``.

        Declining the erase confirmation keeps the existing files and still
        proceeds.
        """

        if self.is_empty(path):
            return True
        if not force:
            if not self._prompter.confirm(CONTINUE_MESSAGE, default=False):
                return False
        if self._prompter.confirm(ERASE_MESSAGE, default=False):
            empty_directory(path)
        return True


__all__ = [
    "DirectorySafetyGuard",
    "IGNORED_ENTRIES",
    "empty_directory",
    "is_empty_listing",
]
