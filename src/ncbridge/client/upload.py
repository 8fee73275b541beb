"""Chunked file upload to Nextcloud.

This module provides:
- ChunkedUploader: simple PUT for small files, chunked sessions for large ones
- Session primitives (start / chunk / finish / abort) for three-step flows
- Streaming upload from any iterable of byte blocks, including a source URL

A chunked upload creates a session collection below the uploads endpoint,
PUTs the byte ranges as "{start:015d}-{end:015d}" (end exclusive) and MOVEs the
virtual ".file" member to the destination, which makes the server assemble
the chunks in name order.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from ncbridge.core.errors import (
    BridgeError,
    HTTPStatusError,
    LocalIOError,
    TransportError,
    ValidationError,
    raise_for_status,
)

if TYPE_CHECKING:
    from ncbridge.client.webdav import NextcloudClient

logger = logging.getLogger(__name__)

CHUNK_SIZE = 10 * 1024 * 1024  # 10 MiB

# Minimum per-request timeouts in seconds
SIMPLE_PUT_TIMEOUT = 60
CHUNK_TIMEOUT = 120
STREAM_CHUNK_TIMEOUT = 300

SOURCE_CONNECT_TIMEOUT = 30
SOURCE_MAX_REDIRECTS = 5


@dataclass
class UploadSession:
    """An open chunked-upload session.

    Attributes:
        session_id: Random identifier of the session collection.
        chunk_dir: Full URL of the session collection.
        bytes_sent: Offset of the next chunk.
        chunk_count: Chunks uploaded so far.
    """

    session_id: str
    chunk_dir: str
    bytes_sent: int = 0
    chunk_count: int = 0


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a completed upload."""

    remote_path: str
    size: int
    chunk_count: int = 0
    chunked: bool = False


@dataclass(frozen=True)
class UploadProgress:
    """Progress snapshot passed to the progress callback."""

    remote_path: str
    bytes_sent: int
    total_size: int | None
    chunk_count: int


ProgressCallback = Callable[[UploadProgress], None]


class StreamPhase(str, Enum):
    """Phase of a streaming upload."""

    BUFFERING = "buffering"  # no session yet
    CHUNKING = "chunking"  # session created, chunks flushed
    STOPPED = "stopped"  # a flush failed, nothing more is read
    FINISHED = "finished"


@dataclass
class StreamUploadState:
    """State of one streaming upload, owned by its read loop."""

    remote_path: str
    buffer: bytearray = field(default_factory=bytearray)
    session: UploadSession | None = None
    phase: StreamPhase = StreamPhase.BUFFERING
    total: int = 0


class ChunkedUploader:
    """Uploads local files and byte streams through a NextcloudClient."""

    def __init__(
        self,
        client: NextcloudClient,
        chunk_size: int = CHUNK_SIZE,
        progress_callback: ProgressCallback | None = None,
        source_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the uploader.

        Args:
            client: Authenticated protocol client.
            chunk_size: Chunk size in bytes; files up to this size use one PUT.
            progress_callback: Optional callback for progress updates.
            source_transport: Optional transport for fetching source URLs.
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._client = client
        self._chunk_size = chunk_size
        self._progress_callback = progress_callback
        self._source_transport = source_transport

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def _timeout(self, minimum: int) -> float:
        return max(self._client.config.timeout, minimum)

    def _report(
        self, remote_path: str, bytes_sent: int, total: int | None, chunks: int
    ) -> None:
        if self._progress_callback:
            self._progress_callback(UploadProgress(
                remote_path=remote_path,
                bytes_sent=bytes_sent,
                total_size=total,
                chunk_count=chunks,
            ))

    # === Session primitives ===

    def start_session(self) -> UploadSession:
        """Create a new chunked-upload session collection."""
        session_id = uuid.uuid4().hex
        chunk_dir = self._client.config.upload_url + session_id
        response = self._client.request("MKCOL", chunk_dir)
        raise_for_status(response, (201, 405), "chunk_mkcol_failed", "MKCOL")
        logger.debug(f"Started upload session {session_id}")
        return UploadSession(session_id=session_id, chunk_dir=chunk_dir)

    def upload_chunk(
        self,
        session: UploadSession,
        data: bytes,
        timeout: float | None = None,
    ) -> UploadSession:
        """Upload the next chunk of a session.

        Args:
            session: Session to append to; its offset and count are advanced.
            data: Chunk content.
            timeout: Request timeout (defaults to the chunk timeout).

        Returns:
            The updated session.
        """
        start = session.bytes_sent
        end = start + len(data)
        url = f"{session.chunk_dir}/{start:015d}-{end:015d}"
        response = self._client.request(
            "PUT", url, content=data,
            timeout=timeout if timeout is not None else self._timeout(CHUNK_TIMEOUT),
        )
        raise_for_status(response, (201, 204), "chunk_put_failed", f"Chunk PUT at offset {start}")

        session.bytes_sent += len(data)
        session.chunk_count += 1
        logger.debug(
            f"Uploaded chunk {session.chunk_count} of session {session.session_id}: "
            f"bytes {start}-{end}"
        )
        return session

    def finish_session(
        self,
        session: UploadSession,
        remote_path: str,
        timeout: float | None = None,
    ) -> None:
        """Assemble the session's chunks into remote_path."""
        response = self._client.request(
            "MOVE",
            f"{session.chunk_dir}/.file",
            headers={"Destination": self._client.dav_url(remote_path)},
            timeout=timeout if timeout is not None else self._timeout(CHUNK_TIMEOUT),
        )
        raise_for_status(response, (201, 204), "chunk_move_failed", "Chunk assembly", remote_path)
        logger.debug(f"Assembled session {session.session_id} into {remote_path}")

    def abort_session(self, session: UploadSession) -> None:
        """Delete a session's chunk collection; failures are only logged."""
        try:
            response = self._client.request("DELETE", session.chunk_dir)
        except BridgeError as e:
            logger.warning(f"Failed to clean up upload session {session.session_id}: {e}")
            return
        if response.status_code not in (204, 404):
            logger.warning(
                f"Failed to clean up upload session {session.session_id}: "
                f"HTTP {response.status_code}"
            )

    # === File upload ===

    def _put(self, remote_path: str, data: bytes, minimum: int) -> None:
        response = self._client.request(
            "PUT", self._client.dav_url(remote_path), content=data,
            timeout=self._timeout(minimum),
        )
        raise_for_status(response, (201, 204), "put_failed", "PUT", remote_path)

    def upload(self, local_path: Path, remote_path: str) -> UploadResult:
        """Upload a local file, chunked when larger than the chunk size.

        Args:
            local_path: File to upload.
            remote_path: Destination path relative to the user root.

        Returns:
            UploadResult describing the upload.

        Raises:
            LocalIOError: If the local file is missing or unreadable.
            BridgeError: If any request fails (the session is aborted first).
        """
        local_path = Path(local_path)
        try:
            size = local_path.stat().st_size
        except OSError as e:
            raise LocalIOError(
                f"Local file not found: {local_path}", "file_not_found", path=str(local_path)
            ) from e
        if not local_path.is_file():
            raise LocalIOError(
                f"Local file not found: {local_path}", "file_not_found", path=str(local_path)
            )

        if size <= self._chunk_size:
            try:
                data = local_path.read_bytes()
            except OSError as e:
                raise LocalIOError(
                    f"Cannot read {local_path}: {e}", "file_not_found", path=str(local_path)
                ) from e
            self._put(remote_path, data, SIMPLE_PUT_TIMEOUT)
            self._report(remote_path, size, size, 0)
            logger.info(f"Uploaded {remote_path} ({size} bytes)")
            return UploadResult(remote_path=remote_path, size=size)

        return self._upload_chunked(local_path, remote_path, size)

    def _read_chunks(self, local_path: Path) -> Iterator[bytes]:
        try:
            with open(local_path, "rb") as f:
                while True:
                    data = f.read(self._chunk_size)
                    if not data:
                        return
                    yield data
        except OSError as e:
            raise LocalIOError(
                f"Cannot read {local_path}: {e}", "file_read_failed", path=str(local_path)
            ) from e

    def _upload_chunked(self, local_path: Path, remote_path: str, size: int) -> UploadResult:
        total_chunks = math.ceil(size / self._chunk_size)
        logger.info(f"Uploading {remote_path} in {total_chunks} chunks")

        session = self.start_session()
        try:
            for data in self._read_chunks(local_path):
                self.upload_chunk(session, data)
                self._report(remote_path, session.bytes_sent, size, session.chunk_count)
        except BridgeError:
            self.abort_session(session)
            raise

        self.finish_session(session, remote_path)
        logger.info(f"Uploaded {remote_path} ({size} bytes, {session.chunk_count} chunks)")
        return UploadResult(
            remote_path=remote_path,
            size=session.bytes_sent,
            chunk_count=session.chunk_count,
            chunked=True,
        )

    # === Stream upload ===

    def _flush(self, state: StreamUploadState, data: bytes) -> None:
        if state.session is None:
            state.session = self.start_session()
            state.phase = StreamPhase.CHUNKING
        self.upload_chunk(state.session, data, timeout=self._timeout(STREAM_CHUNK_TIMEOUT))
        self._report(state.remote_path, state.session.bytes_sent, None, state.session.chunk_count)

    def _stop(self, state: StreamUploadState, source: Iterable[bytes]) -> None:
        state.phase = StreamPhase.STOPPED
        close = getattr(source, "close", None)
        if callable(close):
            close()
        if state.session is not None:
            self.abort_session(state.session)

    def upload_stream(self, source: Iterable[bytes], remote_path: str) -> UploadResult:
        """Upload a stream of byte blocks of unknown length.

        Blocks are buffered until a full chunk is available. Streams that end
        before the first chunk fills are sent with a single PUT.

        Args:
            source: Iterable of byte blocks; closed on failure if closable.
            remote_path: Destination path relative to the user root.

        Raises:
            ValidationError: If the stream is empty.
            BridgeError: If reading or any request fails.
        """
        state = StreamUploadState(remote_path=remote_path)

        try:
            for block in source:
                state.buffer += block
                state.total += len(block)
                while len(state.buffer) >= self._chunk_size:
                    data = bytes(memoryview(state.buffer)[:self._chunk_size])
                    del state.buffer[:self._chunk_size]
                    self._flush(state, data)

            if state.total == 0:
                raise ValidationError("Source is empty.", "url_empty", path=remote_path)

            if state.session is None:
                self._put(remote_path, bytes(state.buffer), STREAM_CHUNK_TIMEOUT)
                state.phase = StreamPhase.FINISHED
                self._report(remote_path, state.total, state.total, 0)
                logger.info(f"Uploaded {remote_path} ({state.total} bytes)")
                return UploadResult(remote_path=remote_path, size=state.total)

            if state.buffer:
                self._flush(state, bytes(state.buffer))
                state.buffer.clear()
        except BridgeError:
            self._stop(state, source)
            raise

        session = state.session
        self.finish_session(session, remote_path, timeout=self._timeout(STREAM_CHUNK_TIMEOUT))
        state.phase = StreamPhase.FINISHED
        logger.info(f"Uploaded {remote_path} ({state.total} bytes, {session.chunk_count} chunks)")
        return UploadResult(
            remote_path=remote_path,
            size=state.total,
            chunk_count=session.chunk_count,
            chunked=True,
        )

    def upload_from_url(self, source_url: str, remote_path: str) -> UploadResult:
        """Fetch a URL and stream its body to remote_path.

        The source is fetched without the Nextcloud credentials.

        Raises:
            HTTPStatusError: If the source does not answer 200 (url_http_error).
            TransportError: If fetching the source fails (url_fetch_failed).
        """
        timeout = httpx.Timeout(None, connect=SOURCE_CONNECT_TIMEOUT)
        with httpx.Client(
            follow_redirects=True,
            max_redirects=SOURCE_MAX_REDIRECTS,
            timeout=timeout,
            transport=self._source_transport,
        ) as source_client:
            try:
                with source_client.stream("GET", source_url) as response:
                    if response.status_code != 200:
                        raise HTTPStatusError(
                            f"Source URL returned HTTP {response.status_code}.",
                            "url_http_error", response.status_code,
                            path=source_url, operation="GET",
                        )
                    logger.info(f"Uploading {source_url} to {remote_path}")
                    return self.upload_stream(_source_blocks(response, source_url), remote_path)
            except httpx.HTTPError as e:
                raise TransportError(
                    f"Failed to fetch source URL: {e}", "url_fetch_failed",
                    path=source_url, operation="GET",
                ) from e


def _source_blocks(response: httpx.Response, source_url: str) -> Iterator[bytes]:
    try:
        yield from response.iter_bytes()
    except httpx.HTTPError as e:
        raise TransportError(
            f"Failed to fetch source URL: {e}", "url_fetch_failed",
            path=source_url, operation="GET",
        ) from e
