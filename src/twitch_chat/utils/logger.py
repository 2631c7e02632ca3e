"""
Console logging for twitch-chat.

One "twitch-chat" logger writes timestamped lines to stderr. Only warnings and
errors reach the console unless --verbose asks for the step-by-step trace of
the token lifecycle and the send.
"""

import logging
import sys

logger = logging.getLogger("twitch-chat")
logger.setLevel(logging.DEBUG)

# stderr keeps stdout free for prompts and the success line
console_handler = logging.StreamHandler(sys.stderr)
console_handler.setLevel(logging.WARNING)
console_handler.setFormatter(
    logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S")
)

if not logger.handlers:
    logger.addHandler(console_handler)


def get_logger(name: str = "") -> logging.Logger:
    """Logger for one module of twitch-chat, e.g. get_logger("twitch_auth")."""
    return logger.getChild(name) if name else logger


def set_verbose(verbose: bool) -> None:
    """Show debug output on the console when verbose, warnings and up otherwise."""
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)


def mask(secret: str, keep: int = 4) -> str:
    """Shorten a token for log output."""
    if len(secret) <= keep:
        return "*" * len(secret)
    return f"{secret[:keep]}..."
