"""FastAPI dependencies for proxy routes."""

from __future__ import annotations

from fastapi import Request

from ncbridge.core.tokens import DownloadTokenService
from ncbridge.service import Bridge


def get_bridge(request: Request) -> Bridge:
    """Get the Nextcloud bridge from app state."""
    bridge: Bridge = request.app.state.bridge
    return bridge


def get_tokens(request: Request) -> DownloadTokenService:
    """Get the download token service from app state."""
    tokens: DownloadTokenService = request.app.state.tokens
    return tokens
