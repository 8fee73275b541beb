"""Command-line interface for ncbridge.

This module provides the main CLI entry point and assembles all commands.

Commands:
- configure: Store connection settings
- test: Check the connection
- ls, info, mkdir, rm, mv: Remote file management
- get, put, put-url: Downloads and uploads
- share: Public download link
- sync: Upload new and changed local files
- token: Issue a download token for the proxy
- serve: Run the download proxy
"""

from __future__ import annotations

import logging
import sys

import click

from ncbridge.cli.config import (
    get_config_dir,
    get_config_file,
    load_config,
    save_config,
)
from ncbridge.cli.configure import configure
from ncbridge.cli.files import get, info, ls, mkdir, mv, put, put_url, rm, share, test
from ncbridge.cli.server import serve, token
from ncbridge.cli.sync import sync


def setup_logging(verbose: bool) -> None:
    """Configure the ncbridge logger for console output.

    Args:
        verbose: Log debug messages instead of warnings only.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root_logger = logging.getLogger("ncbridge")
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(package_name="ncbridge")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """ncbridge - Nextcloud files over WebDAV from the command line."""
    ctx.ensure_object(dict)
    setup_logging(verbose)


# Setup
cli.add_command(configure)
cli.add_command(test)

# File commands
cli.add_command(ls)
cli.add_command(info)
cli.add_command(mkdir)
cli.add_command(rm)
cli.add_command(mv)
cli.add_command(get)
cli.add_command(put)
cli.add_command(put_url)
cli.add_command(share)

# Sync
cli.add_command(sync)

# Download proxy
cli.add_command(token)
cli.add_command(serve)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "get_config_dir",
    "get_config_file",
    "load_config",
    "main",
    "save_config",
    "setup_logging",
]
