"""Shared types for ncbridge.

This module defines the remote resource metadata returned by listings and
the public share description returned by the OCS API.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any

# OCS share type of a public link
PUBLIC_LINK_SHARE = 3


class EntryKind(str, Enum):
    """Kind of a remote resource."""

    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True)
class RemoteEntry:
    """Metadata of one remote file or folder from a multi-status response.

    Attributes:
        path: Path relative to the user's DAV root, slash separated.
        name: Last path segment ("/" for the root itself).
        kind: File or folder.
        size: Size in bytes (0 when the server does not report it).
        mime_type: Content type ("" for folders).
        last_modified: Raw getlastmodified header string.
        file_id: Opaque server identifier.
    """

    path: str
    name: str
    kind: EntryKind
    size: int = 0
    mime_type: str = ""
    last_modified: str = ""
    file_id: str = ""

    @property
    def is_folder(self) -> bool:
        return self.kind is EntryKind.FOLDER

    @property
    def modified_at(self) -> datetime | None:
        """Parsed last-modified time, or None if missing or unparseable."""
        if not self.last_modified:
            return None
        try:
            return parsedate_to_datetime(self.last_modified)
        except (TypeError, ValueError, IndexError):
            return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "type": self.kind.value,
            "size": self.size,
            "mime": self.mime_type,
            "modified": self.last_modified,
            "fileid": self.file_id,
        }


@dataclass(frozen=True)
class Share:
    """Public share returned by the OCS sharing API."""

    id: str
    token: str
    url: str = ""
    path: str = ""
    share_type: int = PUBLIC_LINK_SHARE

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> Share:
        """Create from a parsed OCS share element."""
        share_type = data.get("share_type", "")
        return cls(
            id=data.get("id", ""),
            token=data.get("token", ""),
            url=data.get("url", ""),
            path=data.get("path", ""),
            share_type=int(share_type) if share_type.isdigit() else PUBLIC_LINK_SHARE,
        )
