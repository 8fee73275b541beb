"""Remote index for sync runs.

This module provides:
- RemoteIndex: snapshot of a remote tree keyed by path relative to its root
- RemoteIndexer: builds the snapshot with one listing per folder
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ncbridge.core.errors import BridgeError
from ncbridge.core.paths import normalize_path

if TYPE_CHECKING:
    from ncbridge.client.webdav import NextcloudClient
    from ncbridge.core.types import RemoteEntry

logger = logging.getLogger(__name__)


@dataclass
class RemoteIndex:
    """Remote entries below a sync root.

    Attributes:
        root: Remote root path the keys are relative to.
        entries: Relative path -> entry.
        warnings: Listings that failed and were skipped.
    """

    root: str
    entries: dict[str, RemoteEntry] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def get(self, relative_path: str) -> RemoteEntry | None:
        return self.entries.get(relative_path)

    def __contains__(self, relative_path: object) -> bool:
        return relative_path in self.entries

    def __len__(self) -> int:
        return len(self.entries)


class RemoteIndexer:
    """Builds a RemoteIndex by walking remote folders depth-first."""

    def __init__(self, client: NextcloudClient) -> None:
        self._client = client

    def _relative(self, root: str, path: str) -> str:
        if not root:
            return path
        if path == root:
            return ""
        return path[len(root) + 1:] if path.startswith(root + "/") else path

    def build_index(self, root_path: str) -> RemoteIndex:
        """List every folder below root_path.

        A folder that cannot be listed is recorded as a warning and its
        sub-tree is left out; the traversal continues.

        Args:
            root_path: Remote root relative to the user root.

        Returns:
            The index of everything that could be listed.
        """
        root = normalize_path(root_path)
        index = RemoteIndex(root=root)
        stack = [root]

        while stack:
            folder = stack.pop()
            try:
                children = self._client.list_folder(folder)
            except BridgeError as e:
                message = f"Cannot list {folder or '/'}: {e.message}"
                logger.warning(message)
                index.warnings.append(message)
                continue

            for entry in children:
                index.entries[self._relative(root, entry.path)] = entry
                if entry.is_folder:
                    stack.append(entry.path)

        logger.debug(f"Indexed {len(index)} remote entries under {root or '/'}")
        return index
