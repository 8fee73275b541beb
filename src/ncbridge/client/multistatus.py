"""Parsing of WebDAV multi-status and OCS XML responses.

Servers use various namespace prefixes (d:, oc:, nc:, s:, or none at all),
so namespace URIs are stripped from every tag before traversal and elements
are matched by local name only.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from urllib.parse import unquote

from ncbridge.core.errors import AuthenticationError, ProtocolError, ShareError
from ncbridge.core.paths import normalize_path
from ncbridge.core.types import EntryKind, RemoteEntry

# OCS meta status codes counted as success (v1 uses 100, v2 uses 200)
OCS_OK_CODES = (100, 200)


def _strip_namespaces(root: ET.Element) -> ET.Element:
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]
    return root


def _parse(body: bytes | str, what: str) -> ET.Element:
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise ProtocolError(f"Failed to parse {what} XML: {e}", "xml_parse") from e
    return _strip_namespaces(root)


def _text(parent: ET.Element | None, tag: str) -> str:
    if parent is None:
        return ""
    element = parent.find(tag)
    if element is None or element.text is None:
        return ""
    return element.text.strip()


def _pick_propstat(response: ET.Element) -> ET.Element | None:
    """Select the propstat block carrying a 200 status.

    A server answers with one propstat per status, e.g. a 404 block for
    properties it does not know besides the 200 block.
    """
    propstats = response.findall("propstat")
    for propstat in propstats:
        if "200" in _text(propstat, "status"):
            return propstat
    return propstats[0] if propstats else None


def _relative_href(href: str, dav_root: str) -> str:
    decoded = unquote(href)
    pos = decoded.find(dav_root)
    if pos != -1:
        decoded = decoded[pos + len(dav_root):]
    return normalize_path(decoded)


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def parse_multistatus(body: bytes | str, username: str) -> list[RemoteEntry]:
    """Parse a PROPFIND multi-status body into remote entries.

    Args:
        body: Raw XML body of a 207 response.
        username: Account name, used to strip the DAV root from hrefs.

    Returns:
        One entry per response element, in document order.

    Raises:
        ProtocolError: If the body is not well-formed XML.
    """
    root = _parse(body, "PROPFIND")
    dav_root = f"/remote.php/dav/files/{username}/"

    entries: list[RemoteEntry] = []
    for response in root.iter("response"):
        path = _relative_href(_text(response, "href"), dav_root)

        propstat = _pick_propstat(response)
        prop = propstat.find("prop") if propstat is not None else None

        resourcetype = prop.find("resourcetype") if prop is not None else None
        is_folder = resourcetype is not None and resourcetype.find("collection") is not None

        size = _text(prop, "size") or _text(prop, "getcontentlength")
        entries.append(RemoteEntry(
            path=path,
            name=path.rsplit("/", 1)[-1] if path else "/",
            kind=EntryKind.FOLDER if is_folder else EntryKind.FILE,
            size=_to_int(size) if size else 0,
            mime_type="" if is_folder else _text(prop, "getcontenttype"),
            last_modified=_text(prop, "getlastmodified"),
            file_id=_text(prop, "fileid"),
        ))

    return entries


def _element_to_dict(element: ET.Element) -> dict[str, str]:
    return {child.tag: (child.text or "").strip() for child in element}


def parse_ocs(body: bytes | str) -> ET.Element:
    """Parse an OCS response and check its meta status.

    Returns:
        The <data> element (empty element if absent).

    Raises:
        ProtocolError: If the body is not well-formed XML.
        AuthenticationError: If OCS reports an authentication failure (997).
        ShareError: If the OCS status code is not 100 or 200.
    """
    root = _parse(body, "OCS")
    meta = root.find("meta")
    status = _to_int(_text(meta, "statuscode"))
    if status not in OCS_OK_CODES:
        message = _text(meta, "message") or "Unknown OCS error."
        if status == 997:
            raise AuthenticationError(message, "auth_failed", status, operation="OCS")
        raise ShareError(message, "ocs_error", status, operation="OCS")

    data = root.find("data")
    return data if data is not None else ET.Element("data")


def parse_share_list(body: bytes | str) -> list[dict[str, str]]:
    """Parse a GET shares response into a list of share dictionaries."""
    data = parse_ocs(body)
    return [_element_to_dict(element) for element in data.findall("element")]


def parse_share(body: bytes | str) -> dict[str, str]:
    """Parse a POST share response into a share dictionary."""
    return _element_to_dict(parse_ocs(body))
