"""FastAPI application for the ncbridge download proxy.

The proxy serves Nextcloud files to holders of a signed download token.

Usage:
    uvicorn ncbridge.server.app:app_factory --factory --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from ncbridge import __version__
from ncbridge.cli.config import get_bridge_config, get_token_secret, load_settings
from ncbridge.core.tokens import DownloadTokenService
from ncbridge.server.api.router import router as api_router
from ncbridge.service import Bridge

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Also written to the log file when one is configured
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_installed: list[tuple[logging.Logger, logging.Handler]] = []


def setup_logging(log_path: Path | None = None, level: int = logging.INFO) -> None:
    """Send ncbridge logs to stdout and, optionally, a file.

    Handlers from an earlier call are replaced, so building the app twice
    in one process does not duplicate log lines.

    Args:
        log_path: Optional log file that also collects uvicorn's logs.
        level: Level of the ncbridge logger.
    """
    for target, handler in _installed:
        target.removeHandler(handler)
        handler.close()
    _installed.clear()

    formatter = logging.Formatter(LOG_FORMAT)
    package_logger = logging.getLogger("ncbridge")
    package_logger.setLevel(level)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    _installed.append((package_logger, stdout_handler))

    if log_path is not None:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        _installed.append((package_logger, file_handler))
        _installed.extend((logging.getLogger(name), file_handler) for name in UVICORN_LOGGERS)

    for target, handler in _installed:
        target.addHandler(handler)


def create_app(bridge: Bridge, tokens: DownloadTokenService) -> FastAPI:
    """Create the proxy application.

    Args:
        bridge: Connected Nextcloud bridge used to fetch files.
        tokens: Service verifying download tokens.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown."""
        logger.info(f"ncbridge proxy starting for {bridge.client.config.base_url}")

        yield

        logger.info("ncbridge proxy shutting down")
        bridge.close()

    application = FastAPI(
        title="ncbridge proxy",
        description="Token-protected download proxy for Nextcloud files",
        version=__version__,
        lifespan=lifespan,
    )

    application.state.bridge = bridge
    application.state.tokens = tokens

    application.include_router(api_router)

    return application


def app_factory() -> FastAPI:
    """Factory function for uvicorn --factory mode."""
    settings = load_settings()
    log_path = settings.get("log_path")
    setup_logging(Path(log_path) if log_path else None)
    return create_app(
        bridge=Bridge.connect(get_bridge_config(settings)),
        tokens=DownloadTokenService(get_token_secret(settings)),
    )
