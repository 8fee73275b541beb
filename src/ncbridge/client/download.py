"""File download with atomic writes.

This module provides:
- FileDownloader: streams a remote file to disk through a temporary file
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from ncbridge.core.errors import LocalIOError, TransportError

if TYPE_CHECKING:
    from ncbridge.client.webdav import NextcloudClient

logger = logging.getLogger(__name__)


class FileDownloader:
    """Downloads remote files to local paths."""

    def __init__(self, client: NextcloudClient) -> None:
        self._client = client

    def download_file(self, remote_path: str, local_path: Path) -> Path:
        """Download a remote file with atomic write.

        Uses a temporary file (.tmp) next to the target during download,
        then renames it over the target on success. No partial file is left
        on disk if the download is interrupted.

        Args:
            remote_path: Remote file path relative to the user root.
            local_path: Where to save the file.

        Returns:
            The local path written.

        Raises:
            LocalIOError: If the local file cannot be written.
            BridgeError: If the download request fails.
        """
        logger.info(f"Downloading {remote_path}")
        tmp_path = local_path.with_name(local_path.name + ".tmp")

        try:
            try:
                local_path.parent.mkdir(parents=True, exist_ok=True)
                f = open(tmp_path, "wb")
            except OSError as e:
                raise LocalIOError(
                    f"Cannot write {local_path}: {e}", "write_failed", path=str(local_path)
                ) from e

            size = 0
            with f, self._client.stream_download(remote_path) as response:
                for block in _iter_body(response, remote_path):
                    try:
                        f.write(block)
                    except OSError as e:
                        raise LocalIOError(
                            f"Cannot write {local_path}: {e}", "write_failed",
                            path=str(local_path),
                        ) from e
                    size += len(block)

            try:
                tmp_path.replace(local_path)
            except OSError as e:
                raise LocalIOError(
                    f"Cannot write {local_path}: {e}", "write_failed", path=str(local_path)
                ) from e
        except Exception:
            # Clean up temp file on failure
            if tmp_path.exists():
                with contextlib.suppress(OSError):
                    tmp_path.unlink()
            raise

        logger.info(f"Downloaded {remote_path} to {local_path} ({size} bytes)")
        return local_path


def _iter_body(response: httpx.Response, remote_path: str) -> Iterator[bytes]:
    try:
        yield from response.iter_bytes()
    except httpx.HTTPError as e:
        raise TransportError(
            f"GET failed while reading: {e}", "transport_failed",
            path=remote_path, operation="GET",
        ) from e
