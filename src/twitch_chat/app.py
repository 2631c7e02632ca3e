"""
Session state and the token lifecycle that runs before every send.

Per invocation: load credentials, validate the stored token, refresh or fully
reauthorize if needed, resolve the broadcaster ID if it is not cached, then
send. Fatal errors are raised; only the command line decides to exit.
"""

import webbrowser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import click
import httpx

from .utils.credentials import CredentialRecord, load_credentials, update_credentials
from .utils.errors import ScopeFailure, ValidationFailure
from .utils.logger import get_logger, mask
from .utils.twitch_auth import (
    REQUIRED_SCOPE,
    TokenValidation,
    build_authorize_url,
    exchange_code,
    refresh_token,
    validate_token,
)
from .utils.twitch_client import TwitchClient

logger = get_logger("app")

HTTP_TIMEOUT = 10.0


def _open_browser(url: str) -> bool:
    try:
        return webbrowser.open(url)
    except webbrowser.Error:
        return False


@dataclass
class Session:
    """Everything one run needs: credentials, where they live, and how to talk to the user."""

    credentials: CredentialRecord
    store_path: Path
    http: httpx.Client = field(default_factory=lambda: httpx.Client(timeout=HTTP_TIMEOUT))
    prompt: Callable[[str], str] = click.prompt
    echo: Callable[[str], None] = click.echo
    open_url: Callable[[str], bool] = _open_browser

    @classmethod
    def load(cls, store_path: Path, **kwargs) -> "Session":
        return cls(credentials=load_credentials(store_path), store_path=store_path, **kwargs)

    def client(self) -> TwitchClient:
        return TwitchClient(
            client_id=self.credentials.client_id,
            oauth_token=self.credentials.auth_token,
            http=self.http,
        )

    def close(self) -> None:
        self.http.close()


def _store_tokens(session: Session, access_token: str, new_refresh_token: str | None) -> None:
    creds = session.credentials
    creds.auth_token = access_token
    if new_refresh_token:
        creds.refresh_token = new_refresh_token
    update_credentials(
        session.store_path,
        auth_token=creds.auth_token,
        refresh_token=creds.refresh_token,
    )


def validate(session: Session) -> TokenValidation:
    """Ask Twitch whether the session's token is still good."""
    logger.debug("Validating auth token...")
    return validate_token(session.http, session.credentials.auth_token)


def check_token(session: Session) -> None:
    """Raise ValidationFailure or ScopeFailure unless the stored token can send chat."""
    validation = validate(session)
    if not validation.valid:
        raise ValidationFailure("Auth token invalid")
    if not validation.has_required_scope:
        raise ScopeFailure([REQUIRED_SCOPE])
    logger.debug(f"Auth token for {validation.login} validated with proper scopes")


def refresh(session: Session) -> str | None:
    """Exchange the stored refresh token for a new access token. None on failure."""
    creds = session.credentials
    if not creds.refresh_token:
        logger.debug("No refresh token found")
        return None

    logger.debug("Refreshing auth token...")
    data = refresh_token(session.http, creds.client_id, creds.client_secret, creds.refresh_token)
    if data is None:
        return None

    _store_tokens(session, data["access_token"], data.get("refresh_token"))
    logger.debug(f"Token refreshed successfully ({mask(creds.auth_token)})")
    return creds.auth_token


def authorize(session: Session) -> str:
    """Interactive authorization-code flow. Returns the new access token."""
    creds = session.credentials
    auth_url = build_authorize_url(creds.client_id)

    session.echo("You need to authorize your application with the required scopes.")
    session.echo("")
    session.echo("Opening authorization URL in your default browser...")
    if not session.open_url(auth_url):
        session.echo("Could not open browser automatically.")
        session.echo("Please open this URL manually:")
        session.echo(auth_url)

    session.echo("")
    session.echo("After authorizing, you'll be redirected to a URL like:")
    session.echo("   http://localhost/?code=AUTHORIZATION_CODE&scope=user%3Awrite%3Achat+user%3Abot")
    session.echo("")
    session.echo("Copy the ENTIRE redirect URL and paste it below.")
    redirect_url = session.prompt("Enter the full redirect URL")

    data = exchange_code(session.http, creds.client_id, creds.client_secret, redirect_url.strip())
    _store_tokens(session, data["access_token"], data.get("refresh_token"))
    logger.debug("Refresh token saved for future use")
    return creds.auth_token


def ensure_token(session: Session) -> str:
    """
    Make sure the session holds a token that can send chat.

    An invalid token gets exactly one refresh attempt, then full
    authorization. A valid token missing the chat scope goes straight to
    authorization.
    """
    if not session.credentials.auth_token:
        logger.debug("No auth token found, starting authorization...")
        return authorize(session)

    try:
        check_token(session)
    except ValidationFailure:
        logger.debug("Auth token invalid, refreshing...")
        token = refresh(session)
        if token:
            return token
        logger.debug("Failed to refresh token. Trying full authorization...")
        return authorize(session)
    except ScopeFailure:
        logger.debug("Auth token lacks required scopes, reauthorizing...")
        return authorize(session)

    return session.credentials.auth_token


def resolve_broadcaster_id(session: Session) -> str:
    """Return the cached broadcaster ID, looking it up and saving it on first use."""
    creds = session.credentials
    if creds.broadcaster_id:
        return creds.broadcaster_id

    logger.debug("Fetching broadcaster ID...")
    creds.broadcaster_id = session.client().get_user_id()
    logger.debug(f"Broadcaster ID obtained: {creds.broadcaster_id}")
    update_credentials(session.store_path, broadcaster_id=creds.broadcaster_id)
    return creds.broadcaster_id


def send(session: Session, message: str) -> None:
    """Post message to the broadcaster's own chat. Raises SendFailure if refused."""
    broadcaster_id = session.credentials.broadcaster_id
    session.client().send_chat_message(broadcaster_id, message)


def run(session: Session, message: str) -> None:
    """Full pipeline: token, broadcaster ID, send."""
    ensure_token(session)
    resolve_broadcaster_id(session)
    send(session, message)
