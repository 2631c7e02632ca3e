"""CLI for twitch-chat."""

import sys

import click
import httpx

from .app import Session, run
from .install import check_first_run, install_script, setup_env
from .utils.credentials import default_env_file
from .utils.errors import TwitchChatError
from .utils.logger import get_logger, set_verbose

logger = get_logger("cli")


@click.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        # options end at the first message word, as in `twitch-chat -v -5 degrees`
        "allow_interspersed_args": False,
        "ignore_unknown_options": True,
    }
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose mode (detailed output).")
@click.option("--setup", is_flag=True, help="Configure Twitch API credentials.")
@click.option("--install", "install", is_flag=True, help="Install the command for your user.")
@click.argument("message", nargs=-1, type=click.UNPROCESSED)
def main(verbose: bool, setup: bool, install: bool, message: tuple[str, ...]) -> None:
    """Send a MESSAGE to your Twitch chat from the command line."""
    set_verbose(verbose)
    store_path = default_env_file()

    if setup:
        setup_env(store_path)
        return
    if install:
        install_script()
        return

    exit_code = check_first_run(store_path)
    if exit_code is not None:
        sys.exit(exit_code)

    if not message:
        click.echo("No message provided!")
        click.echo("")
        click.echo("To send a message: twitch-chat [message]")
        click.echo("For help: twitch-chat --help")
        sys.exit(1)

    try:
        session = Session.load(store_path)
    except TwitchChatError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        run(session, " ".join(message))
    except (TwitchChatError, httpx.HTTPError) as e:
        logger.error(str(e))
        sys.exit(1)
    finally:
        session.close()

    click.echo("[SUCCESS] Message sent successfully")
