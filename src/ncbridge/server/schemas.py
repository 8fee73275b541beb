"""Pydantic schemas for proxy responses."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Proxy liveness and the Nextcloud it serves."""

    status: str
    version: str
    nextcloud_url: str


class ErrorResponse(BaseModel):
    """Error body returned with 4xx/5xx statuses."""

    detail: str
