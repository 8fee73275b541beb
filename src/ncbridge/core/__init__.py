"""Core module - Shared config, errors, results, types and tokens."""

from ncbridge.core.config import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_ROOT_PATH,
    BridgeConfig,
    SyncConfig,
)
from ncbridge.core.errors import (
    AuthenticationError,
    BridgeError,
    ConflictError,
    FatalPreconditionError,
    HTTPStatusError,
    LocalIOError,
    NotFoundError,
    ProtocolError,
    ShareError,
    TransportError,
    ValidationError,
)
from ncbridge.core.result import Err, Ok, Result, capture
from ncbridge.core.tokens import DEFAULT_TOKEN_TTL, DownloadTokenService
from ncbridge.core.types import PUBLIC_LINK_SHARE, EntryKind, RemoteEntry, Share

__all__ = [
    # Config
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_ROOT_PATH",
    "BridgeConfig",
    "SyncConfig",
    # Errors
    "AuthenticationError",
    "BridgeError",
    "ConflictError",
    "FatalPreconditionError",
    "HTTPStatusError",
    "LocalIOError",
    "NotFoundError",
    "ProtocolError",
    "ShareError",
    "TransportError",
    "ValidationError",
    # Results
    "Err",
    "Ok",
    "Result",
    "capture",
    # Tokens
    "DEFAULT_TOKEN_TTL",
    "DownloadTokenService",
    # Types
    "PUBLIC_LINK_SHARE",
    "EntryKind",
    "RemoteEntry",
    "Share",
]
