"""
Twitch OAuth2 authorization-code flow.

Builds the authorize URL, pulls the code out of the pasted redirect URL and
exchanges it, refreshes expired tokens and validates stored ones. Every call
takes the httpx.Client to use so the session controls transport and timeouts.
"""

import re
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from .errors import ExchangeFailure, ExtractionFailure
from .logger import get_logger

logger = get_logger("twitch_auth")

AUTHORIZE_URL = "https://id.twitch.tv/oauth2/authorize"
TOKEN_URL = "https://id.twitch.tv/oauth2/token"
VALIDATE_URL = "https://id.twitch.tv/oauth2/validate"

REDIRECT_URI = "http://localhost"
SCOPES = ["user:write:chat", "user:bot"]
REQUIRED_SCOPE = "user:write:chat"

_CODE_PATTERN = re.compile(r"code=([^&#\s]*)")


@dataclass
class TokenValidation:
    """Outcome of a validation call."""

    valid: bool
    has_required_scope: bool = False
    login: str = ""


def _json_or_empty(resp: httpx.Response) -> dict:
    """Decode a JSON object body, or return {} for anything else."""
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def build_authorize_url(client_id: str, scopes: list[str] | None = None) -> str:
    """Authorization URL the user opens in the browser."""
    query = urlencode(
        {
            "client_id": client_id,
            "redirect_uri": REDIRECT_URI,
            "response_type": "code",
            "scope": " ".join(scopes or SCOPES),
        },
        safe=":/",
    )
    return f"{AUTHORIZE_URL}?{query}"


def extract_code(redirect_url: str) -> str:
    """Return the `code` query value of a redirect URL, or "" if there is none."""
    match = _CODE_PATTERN.search(redirect_url)
    return match.group(1) if match else ""


def exchange_code(http: httpx.Client, client_id: str, client_secret: str, redirect_url: str) -> dict:
    """
    Exchange the code found in redirect_url for tokens.

    Raises ExtractionFailure when the URL carries no code and ExchangeFailure
    when Twitch does not hand back an access token.
    """
    code = extract_code(redirect_url)
    if not code:
        raise ExtractionFailure("Could not extract authorization code from URL")

    logger.debug(f"Extracted code: {code}")
    logger.debug("Exchanging authorization code for access token...")

    resp = http.post(
        TOKEN_URL,
        data={
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": REDIRECT_URI,
        },
    )
    data = _json_or_empty(resp)
    if not data.get("access_token"):
        raise ExchangeFailure(resp.text)

    logger.debug("Access token obtained successfully")
    return data


def refresh_token(http: httpx.Client, client_id: str, client_secret: str, refresh_token: str) -> dict | None:
    """Refresh an expired access token. Returns None if Twitch returned no token."""
    resp = http.post(
        TOKEN_URL,
        data={
            "client_id": client_id,
            "client_secret": client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        },
    )
    data = _json_or_empty(resp)
    if not data.get("access_token"):
        logger.debug(f"Token refresh returned {resp.status_code}: {resp.text[:200]}")
        return None
    return data


def validate_token(http: httpx.Client, access_token: str) -> TokenValidation:
    """Validate a token and report whether it carries the scope needed to chat."""
    resp = http.get(
        VALIDATE_URL,
        headers={"Authorization": f"OAuth {access_token}"},
    )
    if resp.status_code != 200:
        logger.debug(f"Validation returned {resp.status_code}")
        return TokenValidation(valid=False)

    data = _json_or_empty(resp)
    if not data.get("client_id"):
        logger.debug("Validation response has no client_id")
        return TokenValidation(valid=False)

    scopes = data.get("scopes") or []
    return TokenValidation(
        valid=True,
        has_required_scope=REQUIRED_SCOPE in scopes,
        login=data.get("login", ""),
    )
