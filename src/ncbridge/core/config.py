"""Configuration classes for ncbridge.

This module defines the connection and sync settings passed to the client,
the sync engine and the download proxy. Nothing in the core reads ambient
configuration; callers build these objects and hand them over.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import quote

from ncbridge.core.errors import ValidationError

# 2 GiB, matches the default "max file size" of the sync settings
DEFAULT_MAX_FILE_SIZE = 2 * 1024 * 1024 * 1024
DEFAULT_ROOT_PATH = "WordPress"


@dataclass(frozen=True)
class BridgeConfig:
    """Connection settings for a Nextcloud server.

    Attributes:
        base_url: Root URL of the server (e.g., "https://cloud.example.com").
        username: Account name, also used in the DAV paths.
        password: Password or app-password.
        timeout: Default request timeout in seconds.
        verify_ssl: Whether to verify TLS certificates.
    """

    base_url: str
    username: str
    password: str
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize the base URL and reject incomplete settings."""
        if not self.base_url or not self.username or not self.password:
            raise ValidationError(
                "Nextcloud connection is not configured.",
                code="not_configured",
            )
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def dav_url(self) -> str:
        """WebDAV files endpoint for the user, with trailing slash."""
        return f"{self.base_url}/remote.php/dav/files/{quote(self.username, safe='')}/"

    @property
    def upload_url(self) -> str:
        """WebDAV chunked-upload endpoint for the user, with trailing slash."""
        return f"{self.base_url}/remote.php/dav/uploads/{quote(self.username, safe='')}/"

    @property
    def ocs_url(self) -> str:
        """OCS sharing API collection endpoint."""
        return f"{self.base_url}/ocs/v2.php/apps/files_sharing/api/v1/shares"

    def public_download_url(self, token: str) -> str:
        """Build the user-facing download URL of a public share."""
        return f"{self.base_url}/index.php/s/{token}/download"

    def __repr__(self) -> str:
        return (
            f"BridgeConfig(base_url={self.base_url!r}, username={self.username!r}, "
            f"timeout={self.timeout!r}, verify_ssl={self.verify_ssl!r})"
        )


@dataclass
class SyncConfig:
    """Settings for configured directory sync runs.

    Attributes:
        root_path: Remote folder under which every pair is synced.
        max_file_size: Files above this size in bytes are skipped (0 = no limit).
        skip_names: Extra file/directory names (or glob patterns) to ignore.
        sync_dirs: (local, remote) directory pairs.
    """

    root_path: str = DEFAULT_ROOT_PATH
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    skip_names: list[str] = field(default_factory=list)
    sync_dirs: list[tuple[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> SyncConfig:
        """Create from a settings dictionary (max file size given in MB)."""
        max_mb = int(str(data.get("max_file_size_mb", DEFAULT_MAX_FILE_SIZE // 1048576)))
        pairs = data.get("sync_dirs") or []
        return cls(
            root_path=str(data.get("root_path", DEFAULT_ROOT_PATH)).strip("/"),
            max_file_size=max_mb * 1048576 if max_mb > 0 else 0,
            skip_names=[str(n) for n in data.get("skip_names") or []],  # type: ignore[union-attr]
            sync_dirs=[(str(p["local"]), str(p["remote"])) for p in pairs],  # type: ignore[index,union-attr]
        )
