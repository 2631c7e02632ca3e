"""
Credential store: a key=value file holding the Twitch app credentials and tokens.

The file is read with python-dotenv and rewritten atomically whenever a key
changes, so a crash never leaves a half-written store behind.
"""

import os
import tempfile
from dataclasses import dataclass, fields
from pathlib import Path

from dotenv import dotenv_values

from .errors import ConfigError
from .logger import get_logger

logger = get_logger("credentials")

ENV_FILE_NAME = ".twitch-chat-env"

REQUIRED_KEYS = ("twitch_username", "client_id", "client_secret")


def default_env_file() -> Path:
    """Store location, overridable with TWITCH_CHAT_CONFIG_DIR."""
    config_dir = os.getenv("TWITCH_CHAT_CONFIG_DIR") or Path.home() / ".config" / "twitch-chat"
    return Path(config_dir) / ENV_FILE_NAME


@dataclass
class CredentialRecord:
    """Persisted credentials for one Twitch account."""

    twitch_username: str = ""
    client_id: str = ""
    client_secret: str = ""
    auth_token: str = ""
    refresh_token: str = ""
    broadcaster_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "CredentialRecord":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v or "" for k, v in data.items() if k in known})

    def missing_required(self) -> list[str]:
        return [key for key in REQUIRED_KEYS if not getattr(self, key)]


def load_credentials(path: Path) -> CredentialRecord:
    """Load the credential store, raising ConfigError if it is absent or incomplete."""
    if not path.exists():
        raise ConfigError(
            f"Configuration file not found at {path}. "
            "Run 'twitch-chat --setup' to configure your Twitch credentials."
        )

    record = CredentialRecord.from_dict(dotenv_values(path))
    missing = record.missing_required()
    if missing:
        raise ConfigError(
            f"Missing required configuration: {', '.join(missing)}. "
            "Run 'twitch-chat --setup' to properly configure your Twitch credentials."
        )
    logger.debug(f"Loaded credentials for {record.twitch_username} from {path}")
    return record


def _atomic_write(path: Path, content: str) -> None:
    """Write content to a temp file next to path, then rename it over path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def update_credentials(path: Path, **values: str) -> None:
    """
    Replace the given keys in the store in one atomic write.

    Existing lines for each key are replaced in place (duplicates dropped);
    keys not yet present are appended. Other lines are kept as they are.
    """
    lines = path.read_text().splitlines() if path.exists() else []
    pending = dict(values)
    out = []

    for line in lines:
        key = line.split("=", 1)[0].strip() if "=" in line else None
        if key in values:
            if key in pending:
                out.append(f"{key}={pending.pop(key)}")
            continue
        out.append(line)

    out.extend(f"{key}={value}" for key, value in pending.items())
    _atomic_write(path, "\n".join(out) + "\n")
    logger.debug(f"Updated {', '.join(values)} in {path}")


def write_credentials(path: Path, record: CredentialRecord) -> None:
    """Write a fresh store containing only the non-empty fields of record."""
    content = "".join(
        f"{f.name}={getattr(record, f.name)}\n"
        for f in fields(record)
        if getattr(record, f.name)
    )
    _atomic_write(path, content)
    logger.info(f"Credentials saved to {path}")
