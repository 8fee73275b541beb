"""ncbridge - Nextcloud WebDAV/OCS client, chunked uploads and directory sync."""

from ncbridge.core import BridgeConfig, Err, Ok, SyncConfig
from ncbridge.service import Bridge

__version__ = "0.1.0"

__all__ = ["Bridge", "BridgeConfig", "Err", "Ok", "SyncConfig", "__version__"]
