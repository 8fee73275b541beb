"""One-way additive directory sync.

This module provides:
- SyncEngine: mirrors a local directory tree into a remote folder
- needs_upload: the per-file change decision

The remote tree is indexed once at the start of a run. Local directories are
walked in name order, sub-directories before files. Remote entries are never
deleted and a failure on one item never stops the run.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from ncbridge.client.upload import ChunkedUploader
from ncbridge.core.config import DEFAULT_MAX_FILE_SIZE
from ncbridge.core.errors import BridgeError, FatalPreconditionError
from ncbridge.core.paths import join_path, normalize_path
from ncbridge.sync.ignore import SkipNames
from ncbridge.sync.indexer import RemoteIndex, RemoteIndexer
from ncbridge.sync.types import SyncAction, SyncReport, human_size

if TYPE_CHECKING:
    from ncbridge.client.webdav import NextcloudClient
    from ncbridge.core.types import RemoteEntry

logger = logging.getLogger(__name__)


def needs_upload(local_size: int, local_mtime: float, remote: RemoteEntry | None) -> bool:
    """Decide whether a local file differs from its remote copy.

    Checked in order: missing remotely, different size, newer local
    modification time (whole seconds). A remote time that is missing or
    cannot be parsed counts as "not newer".
    """
    if remote is None:
        return True
    if remote.size != local_size:
        return True
    modified = remote.modified_at
    if modified is None:
        return False
    return int(local_mtime) > int(modified.timestamp())


class SyncEngine:
    """Uploads new and changed local files to a remote folder."""

    def __init__(
        self,
        client: NextcloudClient,
        uploader: ChunkedUploader | None = None,
        skip_names: SkipNames | None = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        """Initialize the engine.

        Args:
            client: Protocol client used for listing and folder creation.
            uploader: Uploader for file content (defaults to one on client).
            skip_names: Names to ignore (defaults to DEFAULT_SKIP_NAMES).
            max_file_size: Larger files are skipped; 0 disables the limit.
        """
        self._client = client
        self._uploader = uploader or ChunkedUploader(client)
        self._skip = skip_names or SkipNames()
        self._max_file_size = max_file_size

    def sync_directory(self, local_root: Path | str, remote_root: str) -> SyncReport:
        """Sync a local directory into a remote folder.

        Args:
            local_root: Local directory to read.
            remote_root: Remote folder relative to the user root.

        Returns:
            SyncReport with one entry per created folder, uploaded or skipped
            file, warning and per-item error.

        Raises:
            FatalPreconditionError: If local_root is not a directory or the
                remote root cannot be created.
        """
        local_root = Path(local_root)
        remote_root = normalize_path(remote_root)

        if not local_root.is_dir():
            raise FatalPreconditionError(
                f"Local directory not found: {local_root}", "sync_no_dir", path=str(local_root)
            )

        logger.info(f"Syncing {local_root} -> {remote_root or '/'}")
        report = SyncReport()

        try:
            created = self._client.create_folder(remote_root)
        except BridgeError as e:
            raise FatalPreconditionError(
                f"Cannot create remote folder {remote_root}: {e.message}",
                "sync_remote_root", e.status_code, remote_root, e.operation,
            ) from e
        if created:
            report.add(SyncAction.CREATED, remote_root)

        index = RemoteIndexer(self._client).build_index(remote_root)
        for warning in index.warnings:
            report.add(SyncAction.WARNING, warning)

        self._sync_dir(local_root, "", remote_root, index, report)

        logger.info(
            f"Sync of {local_root} done: {report.uploaded} uploaded, "
            f"{report.created} created, {report.errors} errors"
        )
        return report

    def _sync_dir(
        self,
        local_dir: Path,
        relative_dir: str,
        remote_root: str,
        index: RemoteIndex,
        report: SyncReport,
    ) -> SyncReport:
        try:
            with os.scandir(local_dir) as it:
                scanned = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            report.add(SyncAction.ERROR, str(local_dir), f"cannot read directory: {e}")
            return report

        dirs: list[os.DirEntry[str]] = []
        files: list[os.DirEntry[str]] = []
        for entry in scanned:
            if self._skip.should_skip(entry):
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    dirs.append(entry)
                elif entry.is_file(follow_symlinks=False):
                    files.append(entry)
                else:
                    # FIFOs, sockets and device nodes
                    logger.debug(f"Skipping special file {entry.path}")
            except OSError as e:
                report.add(SyncAction.ERROR, entry.path, f"cannot stat: {e}")

        for entry in dirs:
            relative_path = join_path(relative_dir, entry.name)
            remote_path = join_path(remote_root, relative_path)
            if relative_path not in index:
                try:
                    created = self._client.create_folder(remote_path, parents=False)
                except BridgeError as e:
                    report.add(SyncAction.ERROR, remote_path, e.message)
                    continue
                if created:
                    report.add(SyncAction.CREATED, remote_path)
            self._sync_dir(Path(entry.path), relative_path, remote_root, index, report)

        for entry in files:
            self._sync_file(entry, join_path(relative_dir, entry.name), remote_root, index, report)

        return report

    def _sync_file(
        self,
        entry: os.DirEntry[str],
        relative_path: str,
        remote_root: str,
        index: RemoteIndex,
        report: SyncReport,
    ) -> None:
        remote_path = join_path(remote_root, relative_path)
        try:
            stat = entry.stat(follow_symlinks=False)
        except OSError as e:
            report.add(SyncAction.ERROR, remote_path, f"cannot stat: {e}")
            return

        if self._max_file_size and stat.st_size > self._max_file_size:
            report.add(
                SyncAction.SKIPPED, remote_path,
                f"{human_size(stat.st_size)} exceeds limit of {human_size(self._max_file_size)}",
            )
            return

        if not needs_upload(stat.st_size, stat.st_mtime, index.get(relative_path)):
            logger.debug(f"Unchanged: {remote_path}")
            return

        try:
            self._uploader.upload(Path(entry.path), remote_path)
        except BridgeError as e:
            report.add(SyncAction.ERROR, remote_path, e.message)
            return
        report.add(SyncAction.UPLOADED, remote_path, human_size(stat.st_size))
