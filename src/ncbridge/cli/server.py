"""Download proxy commands for the ncbridge CLI.

Commands:
- token: Issue a download token for a remote path
- serve: Run the download proxy
"""

from __future__ import annotations

import sys

import click

from ncbridge.cli.config import get_token_secret
from ncbridge.core.errors import ValidationError
from ncbridge.core.paths import normalize_path
from ncbridge.core.tokens import DEFAULT_TOKEN_TTL, DownloadTokenService


@click.command()
@click.argument("path")
@click.option("--ttl", type=int, default=DEFAULT_TOKEN_TTL, show_default=True, help="Lifetime in seconds.")
def token(path: str, ttl: int) -> None:
    """Issue a download token for a remote path."""
    try:
        secret = get_token_secret()
    except ValidationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    click.echo(DownloadTokenService(secret).issue(normalize_path(path), ttl))


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", type=int, default=8000, show_default=True, help="Port to listen on.")
def serve(host: str, port: int) -> None:
    """Run the token-protected download proxy."""
    import uvicorn

    uvicorn.run("ncbridge.server.app:app_factory", factory=True, host=host, port=port)
