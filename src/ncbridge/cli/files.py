"""File commands for the ncbridge CLI.

Commands:
- test: Check the connection and credentials
- ls: List a remote folder
- info: Show metadata of a remote file or folder
- mkdir: Create a remote folder
- rm: Delete a remote file or folder
- mv: Move or rename a remote file or folder
- get: Download a remote file
- put: Upload a local file
- put-url: Upload the content of a URL
- share: Print the public download link of a remote file
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from ncbridge.cli.config import open_bridge, unwrap
from ncbridge.core.paths import basename
from ncbridge.sync.types import human_size


@click.command()
@click.pass_context
def test(ctx: click.Context) -> None:
    """Check the connection to Nextcloud."""
    bridge = open_bridge(ctx)
    unwrap(bridge.test_connection())
    click.echo(f"Connection OK: {bridge.client.config.base_url}")


@click.command("ls")
@click.argument("path", default="")
@click.pass_context
def ls(ctx: click.Context, path: str) -> None:
    """List a remote folder."""
    entries = unwrap(open_bridge(ctx).list_folder(path))
    for entry in sorted(entries, key=lambda e: (not e.is_folder, e.name.lower())):
        if entry.is_folder:
            click.echo(f"{'<dir>':>10}  {entry.name}/")
        else:
            click.echo(f"{human_size(entry.size):>10}  {entry.name}")


@click.command()
@click.argument("path")
@click.pass_context
def info(ctx: click.Context, path: str) -> None:
    """Show metadata of a remote file or folder as JSON."""
    entry = unwrap(open_bridge(ctx).get_info(path))
    click.echo(json.dumps(entry.to_dict(), indent=2))


@click.command()
@click.argument("path")
@click.option("--no-parents", is_flag=True, help="Do not create missing parent folders.")
@click.pass_context
def mkdir(ctx: click.Context, path: str, no_parents: bool) -> None:
    """Create a remote folder."""
    created = unwrap(open_bridge(ctx).create_folder(path, parents=not no_parents))
    click.echo(f"Created {path}" if created else f"Already exists: {path}")


@click.command("rm")
@click.argument("path")
@click.pass_context
def rm(ctx: click.Context, path: str) -> None:
    """Delete a remote file or folder."""
    unwrap(open_bridge(ctx).delete(path))
    click.echo(f"Deleted {path}")


@click.command("mv")
@click.argument("source")
@click.argument("destination")
@click.option(
    "--overwrite/--no-overwrite",
    default=None,
    help="Allow or forbid replacing an existing destination.",
)
@click.pass_context
def mv(ctx: click.Context, source: str, destination: str, overwrite: bool | None) -> None:
    """Move or rename a remote file or folder."""
    unwrap(open_bridge(ctx).move(source, destination, overwrite))
    click.echo(f"Moved {source} -> {destination}")


@click.command()
@click.argument("remote")
@click.argument("local", required=False, type=click.Path(path_type=Path))
@click.pass_context
def get(ctx: click.Context, remote: str, local: Path | None) -> None:
    """Download a remote file (to its name in the current directory by default)."""
    target = local or Path(basename(remote))
    written = unwrap(open_bridge(ctx).download_to_file(remote, target))
    click.echo(f"Downloaded {remote} -> {written}")


@click.command()
@click.argument("local", type=click.Path(path_type=Path))
@click.argument("remote")
@click.pass_context
def put(ctx: click.Context, local: Path, remote: str) -> None:
    """Upload a local file."""
    result = unwrap(open_bridge(ctx).upload(local, remote))
    how = f"{result.chunk_count} chunks" if result.chunked else "single request"
    click.echo(f"Uploaded {remote} ({human_size(result.size)}, {how})")


@click.command("put-url")
@click.argument("url")
@click.argument("remote")
@click.pass_context
def put_url(ctx: click.Context, url: str, remote: str) -> None:
    """Upload the content of a URL."""
    result = unwrap(open_bridge(ctx).upload_from_url(url, remote))
    click.echo(f"Uploaded {remote} ({human_size(result.size)})")


@click.command()
@click.argument("path")
@click.pass_context
def share(ctx: click.Context, path: str) -> None:
    """Print the public download link of a remote file."""
    click.echo(unwrap(open_bridge(ctx).get_public_url(path)))
