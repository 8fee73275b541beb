"""Remote path helpers.

Remote paths are slash separated and relative to the user's DAV root.
Each segment is percent-encoded on its own so separators survive:

    "/Documents/my file.pdf" -> "Documents/my%20file.pdf"
"""

from __future__ import annotations

from urllib.parse import quote


def split_segments(path: str) -> list[str]:
    """Split a remote path into its non-empty segments."""
    return [segment for segment in path.replace("\\", "/").split("/") if segment]


def normalize_path(path: str) -> str:
    """Drop empty segments and leading/trailing slashes."""
    return "/".join(split_segments(path))


def join_path(*parts: str) -> str:
    """Join remote path parts, ignoring empty ones."""
    return normalize_path("/".join(parts))


def encode_path(path: str) -> str:
    """Percent-encode each segment of a remote path (no leading slash)."""
    return "/".join(quote(segment, safe="") for segment in split_segments(path))


def basename(path: str) -> str:
    """Last segment of a remote path ("" for the root)."""
    segments = split_segments(path)
    return segments[-1] if segments else ""
