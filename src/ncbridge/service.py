"""Public entry point returning Ok/Err results.

This module provides:
- Bridge: one object bundling the client, uploader and sync engine

Every Bridge method returns Ok(value) or Err(error) and does not raise for
any failure the core knows about, so routers and UI code can branch on the
result instead of catching exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import httpx

from ncbridge.client.upload import CHUNK_SIZE, ChunkedUploader, UploadResult, UploadSession
from ncbridge.client.webdav import NextcloudClient
from ncbridge.core.config import BridgeConfig, SyncConfig
from ncbridge.core.errors import FatalPreconditionError
from ncbridge.core.paths import join_path
from ncbridge.core.result import Err, Ok, Result, capture
from ncbridge.core.types import RemoteEntry, Share
from ncbridge.sync.engine import SyncEngine
from ncbridge.sync.ignore import SkipNames
from ncbridge.sync.types import SyncAction, SyncReport

logger = logging.getLogger(__name__)


class Bridge:
    """Nextcloud file operations with tagged results."""

    def __init__(
        self,
        client: NextcloudClient,
        uploader: ChunkedUploader,
        sync_config: SyncConfig | None = None,
    ) -> None:
        self._client = client
        self._uploader = uploader
        self._sync_config = sync_config or SyncConfig()

    @classmethod
    def connect(
        cls,
        config: BridgeConfig,
        transport: httpx.BaseTransport | None = None,
        chunk_size: int = CHUNK_SIZE,
        sync_config: SyncConfig | None = None,
        source_transport: httpx.BaseTransport | None = None,
    ) -> Bridge:
        """Build a Bridge for one account.

        Args:
            config: Connection settings.
            transport: Optional transport for Nextcloud requests.
            chunk_size: Upload chunk size in bytes.
            sync_config: Settings for sync_configured.
            source_transport: Optional transport for upload_from_url sources.
        """
        client = NextcloudClient(config, transport=transport)
        uploader = ChunkedUploader(client, chunk_size=chunk_size, source_transport=source_transport)
        return cls(client, uploader, sync_config)

    @property
    def client(self) -> NextcloudClient:
        return self._client

    @property
    def sync_config(self) -> SyncConfig:
        return self._sync_config

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Bridge:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # === Files and folders ===

    def test_connection(self) -> Result[None]:
        return capture(self._client.test_connection)

    def list_folder(self, path: str = "") -> Result[list[RemoteEntry]]:
        return capture(self._client.list_folder, path)

    def get_info(self, path: str) -> Result[RemoteEntry]:
        return capture(self._client.get_info, path)

    def create_folder(self, path: str, parents: bool = True) -> Result[bool]:
        return capture(self._client.create_folder, path, parents)

    def delete(self, path: str) -> Result[None]:
        return capture(self._client.delete, path)

    def move(self, from_path: str, to_path: str, overwrite: bool | None = None) -> Result[None]:
        return capture(self._client.move, from_path, to_path, overwrite)

    def download(self, path: str) -> Result[bytes]:
        return capture(self._client.download, path)

    def download_to_file(self, path: str, local_path: Path | str) -> Result[Path]:
        return capture(self._client.download_to_file, path, Path(local_path))

    # === Uploads ===

    def upload(self, local_path: Path | str, remote_path: str) -> Result[UploadResult]:
        return capture(self._uploader.upload, Path(local_path), remote_path)

    def upload_stream(self, source: Iterable[bytes], remote_path: str) -> Result[UploadResult]:
        return capture(self._uploader.upload_stream, source, remote_path)

    def upload_from_url(self, source_url: str, remote_path: str) -> Result[UploadResult]:
        return capture(self._uploader.upload_from_url, source_url, remote_path)

    def start_upload(self) -> Result[UploadSession]:
        """Open a session for a client-driven chunked upload."""
        return capture(self._uploader.start_session)

    def upload_chunk(self, session: UploadSession, data: bytes) -> Result[UploadSession]:
        return capture(self._uploader.upload_chunk, session, data)

    def finish_upload(self, session: UploadSession, remote_path: str) -> Result[None]:
        return capture(self._uploader.finish_session, session, remote_path)

    def abort_upload(self, session: UploadSession) -> Result[None]:
        return capture(self._uploader.abort_session, session)

    # === Shares ===

    def get_share(self, path: str) -> Result[Share | None]:
        return capture(self._client.get_share, path)

    def create_share(self, path: str) -> Result[Share]:
        return capture(self._client.create_share, path)

    def get_public_url(self, path: str) -> Result[str]:
        return capture(self._client.get_public_url, path)

    # === Sync ===

    def _engine(self) -> SyncEngine:
        return SyncEngine(
            self._client,
            uploader=self._uploader,
            skip_names=SkipNames(self._sync_config.skip_names),
            max_file_size=self._sync_config.max_file_size,
        )

    def sync_directory(self, local_root: Path | str, remote_root: str) -> Result[SyncReport]:
        return capture(self._engine().sync_directory, local_root, remote_root)

    def sync_configured(self) -> Result[SyncReport]:
        """Sync every configured directory pair under the root path.

        A pair whose local directory is missing, or whose run fails to
        start, adds an error line and the next pair runs.

        Returns:
            Ok with the combined report, or Err if no pair is configured.
        """
        config = self._sync_config
        if not config.sync_dirs:
            return Err(FatalPreconditionError("No sync directories configured.", "sync_no_dirs"))

        engine = self._engine()
        report = SyncReport()
        for local, remote in config.sync_dirs:
            remote_root = join_path(config.root_path, remote)
            if not Path(local).is_dir():
                report.add(SyncAction.ERROR, local, "local directory not found")
                continue
            result = capture(engine.sync_directory, local, remote_root)
            if isinstance(result, Ok):
                report.extend(result.value)
            else:
                logger.warning(f"Sync of {local} failed: {result.message}")
                report.add(SyncAction.ERROR, remote_root, result.message)
        return Ok(report)
