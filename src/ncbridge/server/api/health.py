"""Liveness route for the download proxy."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ncbridge import __version__
from ncbridge.server.api.deps import get_bridge
from ncbridge.server.schemas import HealthResponse
from ncbridge.service import Bridge

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(bridge: Bridge = Depends(get_bridge)) -> HealthResponse:
    """Report that the proxy is up and which Nextcloud it serves.

    Nextcloud itself is not contacted.
    """
    return HealthResponse(
        status="ok",
        version=__version__,
        nextcloud_url=bridge.client.config.base_url,
    )
