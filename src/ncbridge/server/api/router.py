"""Main API router that includes all sub-routers."""

from __future__ import annotations

from fastapi import APIRouter

from ncbridge.server.api import download, health

router = APIRouter()

router.include_router(health.router)
router.include_router(download.router)
