"""
Interactive setup and installation helpers.
"""

import os
import shutil
import sys
from pathlib import Path

import click

from .utils.credentials import CredentialRecord, write_credentials
from .utils.logger import get_logger

logger = get_logger("install")

COMMAND_NAME = "twitch-chat"
INSTALL_DIR = Path.home() / ".local" / "bin"

LAUNCHER = """#!/bin/sh
exec "{python}" -m twitch_chat "$@"
"""


def setup_env(store_path: Path) -> bool:
    """
    Prompt for Twitch credentials and write a fresh store.

    Returns False if the user declined to overwrite an existing store.
    """
    if store_path.exists():
        click.echo("Existing configuration found!")
        click.echo("Setting up new credentials will overwrite your existing configuration.")
        if not click.confirm("Do you want to continue?", default=False):
            click.echo("Setup cancelled. Your existing configuration remains unchanged.")
            return False

    click.echo("Setting up Twitch chat configuration...")
    record = CredentialRecord(
        twitch_username=click.prompt("Enter your Twitch username"),
        client_id=click.prompt("Enter your client ID"),
        client_secret=click.prompt("Enter your client secret", hide_input=True),
    )
    write_credentials(store_path, record)

    click.echo("Setup complete! Now run the command with a message to start the authorization process.")
    return True


def install_script(install_dir: Path | None = None) -> Path:
    """Write a launcher for this interpreter into install_dir (~/.local/bin by default)."""
    install_dir = install_dir or INSTALL_DIR
    install_dir.mkdir(parents=True, exist_ok=True)
    target = install_dir / COMMAND_NAME
    target.write_text(LAUNCHER.format(python=sys.executable))
    target.chmod(0o755)
    logger.info(f"Launcher written to {target}")

    click.echo(f"Installation complete! Installed as '{COMMAND_NAME}'.")
    click.echo("")

    path_dirs = os.environ.get("PATH", "").split(os.pathsep)
    if str(install_dir) not in path_dirs:
        click.echo("Please add the following line to your ~/.bashrc or ~/.zshrc:")
        click.echo(f'export PATH="{install_dir}:$PATH"')
        click.echo("")
        click.echo("Then restart your terminal or run: source ~/.bashrc")
    return target


def check_first_run(store_path: Path, install_dir: Path | None = None) -> int | None:
    """
    Offer installation and setup on first use.

    Returns an exit code when the run should stop here (setup just finished
    or was declined), None to carry on sending.
    """
    if shutil.which(COMMAND_NAME) is None:
        click.echo("It looks like this is your first time running twitch-chat.")
        if click.confirm("Would you like to install it globally to run from anywhere?", default=False):
            install_script(install_dir)
        else:
            click.echo(f"You can install later with: {COMMAND_NAME} --install")

    if not store_path.exists():
        click.echo("You need to set up your Twitch credentials.")
        if click.confirm("Would you like to set them up now?", default=False):
            setup_env(store_path)
            return 0
        click.echo(f"You can set up later with: {COMMAND_NAME} --setup")
        return 1

    return None
