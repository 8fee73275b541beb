"""Configure command for the ncbridge CLI.

Commands:
- configure: Store connection settings in the config file
"""

from __future__ import annotations

import secrets

import click

from ncbridge.cli.config import get_config_file, load_config, save_config


@click.command()
@click.option("--url", prompt="Nextcloud URL", help="Server root URL.")
@click.option("--username", prompt="Username", help="Account name.")
@click.option(
    "--password",
    prompt="Password (or App-Password)",
    hide_input=True,
    help="Password or app-password.",
)
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Request timeout.")
def configure(url: str, username: str, password: str, timeout: float) -> None:
    """Store connection settings in ~/.ncbridge/config.json.

    A download token secret is generated on first use.
    """
    config = load_config()
    config.update({
        "url": url.rstrip("/"),
        "username": username,
        "password": password,
        "timeout": timeout,
    })
    if not config.get("token_secret"):
        config["token_secret"] = secrets.token_urlsafe(32)
    save_config(config)
    click.echo(f"Saved configuration to {get_config_file()}")
