"""WebDAV and OCS client for a Nextcloud server.

This module provides:
- NextcloudClient: translates file operations into WebDAV/OCS requests
- Listing, info, folder creation, delete, move and download
- Public share links through the OCS sharing API
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from ncbridge.client.multistatus import parse_multistatus, parse_share, parse_share_list
from ncbridge.core.errors import (
    AuthenticationError,
    HTTPStatusError,
    NotFoundError,
    ProtocolError,
    TransportError,
    raise_for_status,
)
from ncbridge.core.paths import encode_path, split_segments
from ncbridge.core.types import PUBLIC_LINK_SHARE, RemoteEntry, Share

if TYPE_CHECKING:
    from ncbridge.core.config import BridgeConfig

logger = logging.getLogger(__name__)

# Methods whose request body some HTTP stacks silently drop
WEBDAV_BODY_METHODS = frozenset({
    "PROPFIND", "PROPPATCH", "MKCOL", "COPY",
    "MOVE", "LOCK", "UNLOCK", "REPORT", "SEARCH",
})

PING_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<d:propfind xmlns:d="DAV:">
  <d:prop>
    <d:resourcetype/>
  </d:prop>
</d:propfind>"""

PROPFIND_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<d:propfind xmlns:d="DAV:" xmlns:oc="http://owncloud.org/ns" xmlns:nc="http://nextcloud.org/ns">
  <d:prop>
    <d:resourcetype/>
    <d:getcontenttype/>
    <d:getcontentlength/>
    <d:getlastmodified/>
    <oc:fileid/>
    <oc:size/>
  </d:prop>
</d:propfind>"""

XML_HEADERS = {"Content-Type": "text/xml; charset=UTF-8"}
OCS_HEADERS = {"OCS-APIRequest": "true"}


class NextcloudClient:
    """WebDAV/OCS client bound to one account."""

    def __init__(
        self,
        config: BridgeConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Connection settings.
            transport: Optional httpx transport (mock transports in tests).
        """
        self._config = config
        self._client = httpx.Client(
            auth=(config.username, config.password),
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=True,
            max_redirects=5,
            transport=transport,
        )

    @property
    def config(self) -> BridgeConfig:
        return self._config

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> NextcloudClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    # === URLs ===

    def dav_url(self, path: str, collection: bool = False) -> str:
        """Full WebDAV URL of a remote path."""
        url = self._config.dav_url + encode_path(path)
        if collection:
            url = url.rstrip("/") + "/"
        return url

    # === Transport ===

    def _build(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        content: bytes | str | None = None,
        data: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Request:
        if isinstance(content, str):
            content = content.encode("utf-8")
        headers = dict(headers or {})
        if method in WEBDAV_BODY_METHODS and content:
            # Pin the body length so the payload is sent for non-standard verbs
            headers["Content-Length"] = str(len(content))
        return self._client.build_request(
            method,
            url,
            headers=headers,
            content=content,
            data=data,
            params=params,
            timeout=timeout if timeout is not None else self._config.timeout,
        )

    def _send(self, request: httpx.Request, stream: bool = False) -> httpx.Response:
        logger.debug(f"{request.method} {request.url}")
        try:
            return self._client.send(request, stream=stream)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"{request.method} timed out: {e}", "timeout", operation=request.method
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"{request.method} failed: {e}", "transport_failed", operation=request.method
            ) from e

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        content: bytes | str | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send one authenticated request to an absolute URL.

        The WebDAV body guarantee applies: bodies of PROPFIND, MKCOL, MOVE
        and the other extension verbs are always transmitted.

        Raises:
            TransportError: If no response was received.
        """
        return self._send(self._build(method, url, headers, content, timeout=timeout))

    def _propfind(self, url: str, depth: str, body: str) -> httpx.Response:
        return self.request("PROPFIND", url, {**XML_HEADERS, "Depth": depth}, body)

    # === Connection test ===

    def test_connection(self) -> None:
        """Check connectivity and credentials with a Depth:0 PROPFIND.

        Raises:
            TransportError: If the server cannot be reached.
            AuthenticationError: On 401/403.
            NotFoundError: If the DAV endpoint does not exist.
            HTTPStatusError: On any other non-207 status.
        """
        try:
            response = self._propfind(self._config.dav_url, "0", PING_BODY)
        except TransportError as e:
            raise TransportError(
                f"Could not reach Nextcloud: {e.message}", "connection_failed",
                operation="PROPFIND",
            ) from e

        status = response.status_code
        if status == 207:
            return
        if status in (401, 403):
            raise AuthenticationError(
                "Authentication failed. Check your username and password (or App-Password).",
                "auth_failed", status, operation="PROPFIND",
            )
        if status == 404:
            raise NotFoundError(
                "WebDAV endpoint not found. Check the Nextcloud URL and username.",
                "not_found", status, operation="PROPFIND",
            )
        raise HTTPStatusError(
            f"Nextcloud responded with HTTP {status}.", "connection_failed", status,
            operation="PROPFIND",
        )

    # === Directory operations ===

    def list_folder(self, path: str = "") -> list[RemoteEntry]:
        """List the direct children of a remote folder.

        Args:
            path: Folder path relative to the user root ("" for the root).

        Returns:
            Child entries; the queried folder itself is excluded.
        """
        response = self._propfind(self.dav_url(path, collection=True), "1", PROPFIND_BODY)
        raise_for_status(response, (207,), "propfind_failed", "PROPFIND", path)
        entries = parse_multistatus(response.content, self._config.username)
        # The first resource of a Depth:1 answer is the collection itself
        return entries[1:]

    def get_info(self, path: str) -> RemoteEntry:
        """Get metadata of a single file or folder.

        Raises:
            NotFoundError: If the path does not exist or nothing was returned.
        """
        collection = path == "" or path.endswith("/")
        response = self._propfind(self.dav_url(path, collection), "0", PROPFIND_BODY)
        raise_for_status(response, (207,), "info_failed", "PROPFIND", path)
        entries = parse_multistatus(response.content, self._config.username)
        if not entries:
            raise NotFoundError("No info returned.", "info_empty", path=path, operation="PROPFIND")
        return entries[0]

    def create_folder(self, path: str, parents: bool = True) -> bool:
        """Create a folder, and by default every missing ancestor.

        Ancestors are created root-to-leaf; "already exists" (405) counts as
        success. On failure the ancestors created so far are left in place.

        Args:
            path: Folder path relative to the user root.
            parents: Also create ancestors (set False when they exist).

        Returns:
            True if the leaf folder was created by this call.
        """
        segments = split_segments(path)
        if not segments:
            return False

        start = 1 if parents else len(segments)
        created = False
        for i in range(start, len(segments) + 1):
            current = "/".join(segments[:i])
            response = self.request("MKCOL", self.dav_url(current, collection=True))
            raise_for_status(response, (201, 405), "mkcol_failed", "MKCOL", current)
            created = response.status_code == 201

        if created:
            logger.info(f"Created folder {'/'.join(segments)}")
        return created

    def delete(self, path: str) -> None:
        """Delete a remote file or folder; a missing path counts as deleted."""
        response = self.request("DELETE", self.dav_url(path))
        if response.status_code == 404:
            logger.debug(f"DELETE {path}: already gone")
            return
        raise_for_status(response, (204,), "delete_failed", "DELETE", path)
        logger.info(f"Deleted {path}")

    def move(self, from_path: str, to_path: str, overwrite: bool | None = None) -> None:
        """Move or rename a remote resource.

        Args:
            from_path: Current remote path.
            to_path: New remote path.
            overwrite: Send "Overwrite: T/F" when set.
        """
        headers = {"Destination": self.dav_url(to_path)}
        if overwrite is not None:
            headers["Overwrite"] = "T" if overwrite else "F"
        response = self.request("MOVE", self.dav_url(from_path), headers)
        raise_for_status(response, (201, 204), "move_failed", "MOVE", from_path)
        logger.info(f"Moved {from_path} -> {to_path}")

    # === Download ===

    def download(self, path: str) -> bytes:
        """Download a remote file and return its content."""
        response = self.request(
            "GET", self.dav_url(path), timeout=max(self._config.timeout, 120)
        )
        raise_for_status(response, (200,), "download_failed", "GET", path)
        return response.content

    @contextmanager
    def stream_download(self, path: str) -> Iterator[httpx.Response]:
        """Open a streaming GET of a remote file.

        Yields:
            The open response; iterate response.iter_bytes() to read it.
        """
        request = self._build("GET", self.dav_url(path), timeout=max(self._config.timeout, 120))
        response = self._send(request, stream=True)
        try:
            raise_for_status(response, (200,), "download_failed", "GET", path)
            yield response
        finally:
            response.close()

    def download_to_file(self, path: str, local_path: Path) -> Path:
        """Download a remote file to a local path, creating parent dirs."""
        from ncbridge.client.download import FileDownloader

        return FileDownloader(self).download_file(path, Path(local_path))

    # === OCS sharing API ===

    def _ocs(self, method: str, **kwargs: object) -> httpx.Response:
        request = self._build(method, self._config.ocs_url, headers=OCS_HEADERS, **kwargs)  # type: ignore[arg-type]
        response = self._send(request)
        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Authentication failed for the sharing API.", "auth_failed",
                response.status_code, operation="OCS",
            )
        return response

    def get_share(self, path: str) -> Share | None:
        """Get the existing public link share of a path.

        Returns:
            The most recent public link share, or None if there is none.
        """
        response = self._ocs("GET", params={"path": "/" + path.lstrip("/")})
        shares = [
            Share.from_dict(data) for data in parse_share_list(response.content)
        ]
        public = [share for share in shares if share.share_type == PUBLIC_LINK_SHARE]
        return public[-1] if public else None

    def create_share(self, path: str) -> Share:
        """Create a public link share for a path."""
        response = self._ocs(
            "POST",
            data={"path": "/" + path.lstrip("/"), "shareType": str(PUBLIC_LINK_SHARE)},
        )
        data = parse_share(response.content)
        if not data:
            raise ProtocolError(
                "Unexpected OCS response when creating share.", "share_failed",
                path=path, operation="OCS",
            )
        logger.info(f"Created public share for {path}")
        return Share.from_dict(data)

    def get_public_url(self, path: str) -> str:
        """Get or create a public share and return its download URL."""
        share = self.get_share(path)
        if share is None:
            share = self.create_share(path)
        if not share.token:
            raise ProtocolError("Share token not found.", "no_token", path=path, operation="OCS")
        return self._config.public_download_url(share.token)
