"""Shared fixtures: an in-memory Nextcloud WebDAV/OCS server.

FakeDav answers the requests NextcloudClient and ChunkedUploader send,
through an httpx.MockTransport, so multi-request flows (chunked uploads,
sync runs) can be tested end to end without a network.
"""

import base64
import time
from collections.abc import Callable, Generator
from email.utils import formatdate
from urllib.parse import parse_qs, quote, unquote, urlsplit

import httpx
import pytest

from ncbridge.client.webdav import NextcloudClient
from ncbridge.core.config import BridgeConfig

BASE_URL = "https://cloud.example.com"
USERNAME = "alice"
PASSWORD = "secret"


def _parent(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


class FakeDav:
    """In-memory WebDAV/OCS server for one user."""

    def __init__(
        self,
        username: str = USERNAME,
        password: str = PASSWORD,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.username = username
        self.password = password
        self.clock = clock
        self.folders: set[str] = {""}
        self.files: dict[str, bytes] = {}
        self.mtimes: dict[str, str] = {}
        self.uploads: dict[str, dict[str, bytes]] = {}
        self.shares: list[dict[str, str]] = []
        self.requests: list[httpx.Request] = []
        self._failures: list[tuple[str, str, int]] = []
        self._dav_prefix = f"/remote.php/dav/files/{username}"
        self._upload_prefix = f"/remote.php/dav/uploads/{username}"

    # === Test helpers ===

    def fail(self, method: str, match: str, status: int) -> None:
        """Answer requests of method whose URL path contains match with status."""
        self._failures.append((method, match, status))

    def add_folder(self, path: str) -> None:
        segments = path.strip("/").split("/")
        for i in range(1, len(segments) + 1):
            self.folders.add("/".join(segments[:i]))

    def add_file(self, path: str, content: bytes, mtime: float | None = None) -> None:
        path = path.strip("/")
        if _parent(path):
            self.add_folder(_parent(path))
        self.files[path] = content
        self.mtimes[path] = formatdate(mtime if mtime is not None else self.clock(), usegmt=True)

    def set_mtime(self, path: str, value: str) -> None:
        self.mtimes[path] = value

    def requests_for(self, method: str, match: str = "") -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and match in r.url.path]

    def exists(self, path: str) -> bool:
        return path in self.folders or path in self.files

    # === Transport ===

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        for method, match, status in self._failures:
            if request.method == method and match in path:
                return httpx.Response(status)

        if self.password and not self._authorized(request):
            return httpx.Response(401)

        if path.startswith(self._dav_prefix):
            return self._files(request, path[len(self._dav_prefix):].strip("/"))
        if path.startswith(self._upload_prefix):
            return self._uploads(request, path[len(self._upload_prefix):].strip("/"))
        if path.endswith("/apps/files_sharing/api/v1/shares"):
            return self._ocs(request)
        return httpx.Response(404)

    def _authorized(self, request: httpx.Request) -> bool:
        expected = base64.b64encode(f"{self.username}:{self.password}".encode()).decode()
        return request.headers.get("Authorization") == f"Basic {expected}"

    def _dest(self, request: httpx.Request) -> str:
        dest = unquote(urlsplit(request.headers["Destination"]).path)
        return dest[len(self._dav_prefix):].strip("/")

    def _files(self, request: httpx.Request, rel: str) -> httpx.Response:
        method = request.method
        if method == "PROPFIND":
            if not request.content:
                return httpx.Response(400)
            return self._propfind(rel, request.headers.get("Depth", "1"))
        if method == "MKCOL":
            if self.exists(rel):
                return httpx.Response(405)
            if _parent(rel) not in self.folders:
                return httpx.Response(409)
            self.folders.add(rel)
            return httpx.Response(201)
        if method == "PUT":
            return self._store(rel, request.content)
        if method == "GET":
            if rel not in self.files:
                return httpx.Response(404)
            return httpx.Response(200, content=self.files[rel])
        if method == "DELETE":
            if not self.exists(rel):
                return httpx.Response(404)
            self._remove(rel)
            return httpx.Response(204)
        if method == "MOVE":
            if not self.exists(rel):
                return httpx.Response(404)
            dest = self._dest(request)
            existed = self.exists(dest)
            if existed and request.headers.get("Overwrite") == "F":
                return httpx.Response(412)
            self._move(rel, dest)
            return httpx.Response(204 if existed else 201)
        return httpx.Response(405)

    def _store(self, rel: str, content: bytes) -> httpx.Response:
        if _parent(rel) not in self.folders:
            return httpx.Response(409)
        existed = rel in self.files
        self.files[rel] = content
        self.mtimes[rel] = formatdate(self.clock(), usegmt=True)
        return httpx.Response(204 if existed else 201)

    def _remove(self, rel: str) -> None:
        for path in [p for p in self.files if p == rel or p.startswith(rel + "/")]:
            del self.files[path]
        self.folders -= {p for p in self.folders if p == rel or p.startswith(rel + "/")}

    def _move(self, rel: str, dest: str) -> None:
        if rel in self.files:
            self.files[dest] = self.files.pop(rel)
            self.mtimes[dest] = self.mtimes.pop(rel, formatdate(self.clock(), usegmt=True))
            return
        self._remove(dest)
        for path in sorted(p for p in self.folders if p == rel or p.startswith(rel + "/")):
            self.folders.add(dest + path[len(rel):])
        for path in [p for p in self.files if p.startswith(rel + "/")]:
            self.files[dest + path[len(rel):]] = self.files.pop(path)
        self._remove(rel)

    def _uploads(self, request: httpx.Request, rel: str) -> httpx.Response:
        session_id, _, member = rel.partition("/")
        method = request.method
        if method == "MKCOL" and not member:
            if session_id in self.uploads:
                return httpx.Response(405)
            self.uploads[session_id] = {}
            return httpx.Response(201)
        if session_id not in self.uploads:
            return httpx.Response(404)
        if method == "PUT" and member:
            self.uploads[session_id][member] = request.content
            return httpx.Response(201)
        if method == "MOVE" and member == ".file":
            chunks = self.uploads.pop(session_id)
            content = b"".join(chunks[name] for name in sorted(chunks))
            dest = self._dest(request)
            existed = dest in self.files
            response = self._store(dest, content)
            if response.status_code >= 400:
                return response
            return httpx.Response(204 if existed else 201)
        if method == "DELETE" and not member:
            del self.uploads[session_id]
            return httpx.Response(204)
        return httpx.Response(405)

    # === XML ===

    def _href(self, path: str) -> str:
        href = f"{self._dav_prefix}/{quote(path)}" if path else f"{self._dav_prefix}/"
        if path and path in self.folders:
            href += "/"
        return href

    def _response_xml(self, path: str) -> str:
        if path in self.folders:
            props = (
                "<d:resourcetype><d:collection/></d:resourcetype>"
                "<d:getlastmodified>Mon, 01 Jan 2024 00:00:00 GMT</d:getlastmodified>"
                f"<oc:size>{self._tree_size(path)}</oc:size>"
            )
        else:
            content = self.files[path]
            props = (
                "<d:resourcetype/>"
                f"<d:getlastmodified>{self.mtimes.get(path, '')}</d:getlastmodified>"
                f"<d:getcontentlength>{len(content)}</d:getcontentlength>"
                "<d:getcontenttype>application/octet-stream</d:getcontenttype>"
                f"<oc:size>{len(content)}</oc:size>"
            )
        return (
            "<d:response>"
            f"<d:href>{self._href(path)}</d:href>"
            f"<d:propstat><d:prop>{props}<oc:fileid>{100 + len(path)}</oc:fileid>"
            "</d:prop><d:status>HTTP/1.1 200 OK</d:status></d:propstat>"
            "<d:propstat><d:prop><nc:has-preview/></d:prop>"
            "<d:status>HTTP/1.1 404 Not Found</d:status></d:propstat>"
            "</d:response>"
        )

    def _tree_size(self, folder: str) -> int:
        prefix = folder + "/" if folder else ""
        return sum(len(c) for p, c in self.files.items() if p.startswith(prefix))

    def _propfind(self, rel: str, depth: str) -> httpx.Response:
        if not self.exists(rel):
            return httpx.Response(404)
        paths = [rel]
        if depth == "1" and rel in self.folders:
            children = (self.folders | set(self.files)) - {""}
            paths += sorted(p for p in children if _parent(p) == rel and p != rel)
        body = (
            '<?xml version="1.0"?>'
            '<d:multistatus xmlns:d="DAV:" xmlns:oc="http://owncloud.org/ns" '
            'xmlns:nc="http://nextcloud.org/ns">'
            + "".join(self._response_xml(p) for p in paths)
            + "</d:multistatus>"
        )
        return httpx.Response(207, content=body.encode(), headers={"Content-Type": "application/xml"})

    def _ocs(self, request: httpx.Request) -> httpx.Response:
        if request.headers.get("OCS-APIRequest") != "true":
            return httpx.Response(400)
        if request.method == "GET":
            path = request.url.params.get("path", "")
            matching = [s for s in self.shares if s["path"] == path]
            data = "".join(
                "<element>" + "".join(f"<{k}>{v}</{k}>" for k, v in s.items()) + "</element>"
                for s in matching
            )
            return self._ocs_response(data)
        if request.method == "POST":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            if form["path"].strip("/") not in self.files and form["path"].strip("/") not in self.folders:
                return self._ocs_response("", status=404, message="Wrong path, file/folder doesn't exist")
            token = f"tok{len(self.shares) + 1}"
            share = {
                "id": str(len(self.shares) + 1),
                "share_type": form.get("shareType", "3"),
                "path": form["path"],
                "token": token,
                "url": f"{BASE_URL}/s/{token}",
            }
            self.shares.append(share)
            return self._ocs_response("".join(f"<{k}>{v}</{k}>" for k, v in share.items()))
        return httpx.Response(405)

    def _ocs_response(self, data: str, status: int = 200, message: str = "OK") -> httpx.Response:
        body = (
            '<?xml version="1.0"?><ocs><meta><status>ok</status>'
            f"<statuscode>{status}</statuscode><message>{message}</message></meta>"
            f"<data>{data}</data></ocs>"
        )
        return httpx.Response(200, content=body.encode(), headers={"Content-Type": "application/xml"})


@pytest.fixture
def dav() -> FakeDav:
    """Create an empty in-memory server."""
    return FakeDav()


@pytest.fixture
def dav_transport(dav: FakeDav) -> httpx.MockTransport:
    """Create a transport routed to the in-memory server."""
    return httpx.MockTransport(dav.handler)


@pytest.fixture
def bridge_config() -> BridgeConfig:
    """Create connection settings matching the in-memory server."""
    return BridgeConfig(base_url=BASE_URL, username=USERNAME, password=PASSWORD)


@pytest.fixture
def nc_client(
    bridge_config: BridgeConfig, dav_transport: httpx.MockTransport
) -> Generator[NextcloudClient, None, None]:
    """Create a client talking to the in-memory server."""
    client = NextcloudClient(bridge_config, transport=dav_transport)
    yield client
    client.close()
