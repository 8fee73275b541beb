"""Configuration utilities for the ncbridge CLI and proxy.

Settings are read from ~/.ncbridge/config.json; the NCBRIDGE_* environment
variables override the connection fields of the file. This module also
provides the helpers shared by the CLI commands.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, TypeVar

import click

from ncbridge.core.config import BridgeConfig, SyncConfig
from ncbridge.core.errors import ValidationError
from ncbridge.core.result import Err, Result
from ncbridge.service import Bridge

T = TypeVar("T")

ENV_PREFIX = "NCBRIDGE_"

# config.json key -> environment variable
ENV_KEYS = {
    "url": "NCBRIDGE_URL",
    "username": "NCBRIDGE_USERNAME",
    "password": "NCBRIDGE_PASSWORD",
    "timeout": "NCBRIDGE_TIMEOUT",
    "token_secret": "NCBRIDGE_TOKEN_SECRET",
}


def get_config_dir() -> Path:
    """Get the configuration directory for ncbridge.

    Returns:
        Path to ~/.ncbridge or equivalent.
    """
    return Path.home() / ".ncbridge"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def load_settings() -> dict[str, Any]:
    """Load the config file with environment overrides applied."""
    config = load_config()
    for key, env_name in ENV_KEYS.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value
    return config


def get_bridge_config(settings: dict[str, Any] | None = None) -> BridgeConfig:
    """Build connection settings.

    Raises:
        ValidationError: If the URL, username or password is missing, or the
            timeout is not a number.
    """
    settings = load_settings() if settings is None else settings
    try:
        timeout = float(settings.get("timeout") or 30)
    except ValueError as e:
        raise ValidationError(f"Invalid timeout: {settings.get('timeout')}", "bad_timeout") from e
    return BridgeConfig(
        base_url=str(settings.get("url") or ""),
        username=str(settings.get("username") or ""),
        password=str(settings.get("password") or ""),
        timeout=timeout,
        verify_ssl=bool(settings.get("verify_ssl", True)),
    )


def get_sync_config(settings: dict[str, Any] | None = None) -> SyncConfig:
    """Build sync settings from the "sync" section."""
    settings = load_settings() if settings is None else settings
    return SyncConfig.from_dict(dict(settings.get("sync") or {}))


def open_bridge(ctx: click.Context) -> Bridge:
    """Connect a Bridge from the current settings, or exit with an error."""
    obj = ctx.obj or {}
    try:
        config = get_bridge_config()
        sync_config = get_sync_config()
    except ValidationError as e:
        click.echo(f"Error: {e.message} Run 'ncbridge configure' first.", err=True)
        sys.exit(1)
    bridge = Bridge.connect(
        config,
        transport=obj.get("transport"),
        sync_config=sync_config,
        source_transport=obj.get("source_transport"),
    )
    ctx.call_on_close(bridge.close)
    return bridge


def unwrap(result: Result[T]) -> T:
    """Return the value of a result, or print the error and exit 1."""
    if isinstance(result, Err):
        click.echo(f"Error: {result.message}", err=True)
        sys.exit(1)
    return result.value


def get_token_secret(settings: dict[str, Any] | None = None) -> str:
    """Get the download token signing secret.

    Raises:
        ValidationError: If no secret is configured.
    """
    settings = load_settings() if settings is None else settings
    secret = str(settings.get("token_secret") or "")
    if not secret:
        raise ValidationError(
            f"No token secret configured. Set {ENV_PREFIX}TOKEN_SECRET or run 'ncbridge configure'.",
            "no_token_secret",
        )
    return secret
