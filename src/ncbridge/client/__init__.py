"""Client module - WebDAV/OCS protocol client, uploads and downloads."""

from ncbridge.client.download import FileDownloader
from ncbridge.client.upload import (
    CHUNK_SIZE,
    ChunkedUploader,
    StreamPhase,
    StreamUploadState,
    UploadProgress,
    UploadResult,
    UploadSession,
)
from ncbridge.client.webdav import NextcloudClient

__all__ = [
    "CHUNK_SIZE",
    "ChunkedUploader",
    "FileDownloader",
    "NextcloudClient",
    "StreamPhase",
    "StreamUploadState",
    "UploadProgress",
    "UploadResult",
    "UploadSession",
]
