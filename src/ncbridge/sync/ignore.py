"""Skip names for directory sync.

This module provides:
- SkipNames: matches local file and directory names to leave out of a sync
- DEFAULT_SKIP_NAMES: VCS metadata, OS litter and dependency directories
"""

from __future__ import annotations

import fnmatch
import os

DEFAULT_SKIP_NAMES = [
    ".git",
    ".svn",
    ".DS_Store",
    "Thumbs.db",
    ".htaccess",
    "node_modules",
    "vendor",
]

_GLOB_CHARS = set("*?[")


class SkipNames:
    """Matches entry names against exact names and glob patterns."""

    def __init__(self, names: list[str] | None = None) -> None:
        """Initialize with extra names.

        Args:
            names: Names or fnmatch patterns added to the defaults.
        """
        self._exact: set[str] = set()
        self._patterns: list[str] = []
        for name in DEFAULT_SKIP_NAMES + list(names or []):
            self.add(name)

    def add(self, name: str) -> None:
        """Add a name or glob pattern."""
        name = name.strip().strip("/")
        if not name:
            return
        if _GLOB_CHARS & set(name):
            self._patterns.append(name)
        else:
            self._exact.add(name)

    def matches(self, name: str) -> bool:
        """Check if an entry name is skipped."""
        if name in self._exact:
            return True
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self._patterns)

    def should_skip(self, entry: os.DirEntry[str]) -> bool:
        """Check if a scanned entry is skipped.

        Symlinks are always skipped.
        """
        if entry.is_symlink():
            return True
        return self.matches(entry.name)
