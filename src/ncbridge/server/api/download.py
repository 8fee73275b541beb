"""Token-protected download route.

Serves a Nextcloud file to clients that hold a signed token for its path,
without exposing the account credentials.
"""

from __future__ import annotations

import logging
import mimetypes
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ncbridge.core.errors import NotFoundError
from ncbridge.core.paths import basename, normalize_path
from ncbridge.core.result import Err
from ncbridge.core.tokens import DownloadTokenService
from ncbridge.server.api.deps import get_bridge, get_tokens
from ncbridge.server.schemas import ErrorResponse
from ncbridge.service import Bridge

logger = logging.getLogger(__name__)

router = APIRouter(tags=["download"])


def content_disposition(filename: str) -> str:
    """Build an inline Content-Disposition header value for any file name.

    Names outside ASCII get an RFC 6266 ``filename*`` parameter next to an
    ASCII fallback, since response headers are encoded as latin-1.
    """
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("\\", "_").replace('"', "_")
    value = f'inline; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


@router.get(
    "/download",
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
def download(
    path: str = Query(...),
    token: str = Query(...),
    bridge: Bridge = Depends(get_bridge),
    tokens: DownloadTokenService = Depends(get_tokens),
) -> Response:
    """Stream a remote file if the token is valid for its path."""
    path = normalize_path(path)
    if not path or not tokens.verify(token, path):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired download token",
        )

    result = bridge.download(path)
    if isinstance(result, Err):
        if isinstance(result.error, NotFoundError):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"File not found: {path}",
            )
        logger.warning(f"Proxy download of {path} failed: {result.message}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Download failed: {result.message}",
        )

    filename = basename(path)
    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return Response(
        content=result.value,
        media_type=media_type,
        headers={
            "Content-Disposition": content_disposition(filename),
            "Cache-Control": "private, max-age=3600",
        },
    )
