"""Sync command for the ncbridge CLI.

Commands:
- sync: Upload new and changed files of local directories
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ncbridge.cli.config import open_bridge, unwrap


@click.command()
@click.argument("local", required=False, type=click.Path(path_type=Path))
@click.argument("remote", required=False)
@click.pass_context
def sync(ctx: click.Context, local: Path | None, remote: str | None) -> None:
    """Upload new and changed files to Nextcloud.

    With LOCAL and REMOTE, syncs that one directory. Without arguments,
    syncs every directory pair of the "sync" section of the config file
    below its root path.

    Remote files are never deleted.
    """
    if (local is None) != (remote is None):
        raise click.UsageError("Give both LOCAL and REMOTE, or neither.")

    bridge = open_bridge(ctx)
    if local is not None and remote is not None:
        report = unwrap(bridge.sync_directory(local, remote))
    else:
        report = unwrap(bridge.sync_configured())

    for line in report.lines:
        click.echo(line)
    click.echo(f"Done: {report.uploaded} uploaded, {report.created} created, {report.errors} errors")
    if report.errors:
        sys.exit(1)
