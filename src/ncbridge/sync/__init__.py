"""Sync module - Additive one-way sync of local directories to Nextcloud."""

from ncbridge.sync.engine import SyncEngine, needs_upload
from ncbridge.sync.ignore import DEFAULT_SKIP_NAMES, SkipNames
from ncbridge.sync.indexer import RemoteIndex, RemoteIndexer
from ncbridge.sync.types import SyncAction, SyncLogEntry, SyncReport, human_size

__all__ = [
    "DEFAULT_SKIP_NAMES",
    "RemoteIndex",
    "RemoteIndexer",
    "SkipNames",
    "SyncAction",
    "SyncEngine",
    "SyncLogEntry",
    "SyncReport",
    "human_size",
    "needs_upload",
]
