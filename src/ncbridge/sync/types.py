"""Shared types for sync runs.

This module provides:
- SyncAction: kind of a sync log entry
- SyncLogEntry: one line of the sync log
- SyncReport: ordered log of one or more sync runs
- human_size: byte counts for log lines
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SyncAction(str, Enum):
    """What happened to one path during a sync run."""

    CREATED = "created"
    UPLOADED = "uploaded"
    SKIPPED = "skipped"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class SyncLogEntry:
    """One log line of a sync run."""

    action: SyncAction
    path: str
    detail: str = ""

    def __str__(self) -> str:
        line = f"{self.action.value}: {self.path}"
        if self.detail:
            line += f" ({self.detail})"
        return line


@dataclass
class SyncReport:
    """Append-only log of a sync run."""

    entries: list[SyncLogEntry] = field(default_factory=list)

    def add(self, action: SyncAction, path: str, detail: str = "") -> SyncLogEntry:
        entry = SyncLogEntry(action, path, detail)
        self.entries.append(entry)
        return entry

    def extend(self, other: SyncReport) -> None:
        self.entries.extend(other.entries)

    @property
    def lines(self) -> list[str]:
        return [str(entry) for entry in self.entries]

    def count(self, action: SyncAction) -> int:
        return sum(1 for entry in self.entries if entry.action is action)

    @property
    def uploaded(self) -> int:
        return self.count(SyncAction.UPLOADED)

    @property
    def created(self) -> int:
        return self.count(SyncAction.CREATED)

    @property
    def errors(self) -> int:
        return self.count(SyncAction.ERROR)


def human_size(size: int) -> str:
    """Format a byte count, e.g. 1536 -> "1.5 KB"."""
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{size} B" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"
