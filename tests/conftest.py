from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs

import httpx
import pytest

from twitch_chat.app import Session
from twitch_chat.utils.credentials import load_credentials

BASE_STORE = (
    "twitch_username=streamer\n"
    "client_id=cid\n"
    "client_secret=secret\n"
)


class FakeTwitch:
    """Stands in for id.twitch.tv and api.twitch.tv behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []
        self.token_requests: List[Dict[str, str]] = []
        self.sent: List[Dict[str, Any]] = []
        self.validate_reply: Tuple[int, Any] = (
            200,
            {"client_id": "cid", "login": "streamer", "user_id": "1234", "scopes": ["user:bot", "user:write:chat"], "expires_in": 3600},
        )
        self.token_replies: Dict[str, Tuple[int, Any]] = {
            "refresh_token": (200, {"access_token": "refreshed-token", "refresh_token": "new-refresh"}),
            "authorization_code": (200, {"access_token": "authorized-token", "refresh_token": "auth-refresh"}),
        }
        self.users_reply: Tuple[int, Any] = (200, {"data": [{"id": "1234", "login": "streamer"}]})
        self.send_reply: Tuple[int, Any] = (204, None)
        self.error: Optional[Exception] = None

    def count(self, path: str) -> int:
        return sum(1 for _, p in self.calls if p == path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        if self.error is not None:
            raise self.error

        if path == "/oauth2/validate":
            status, body = self.validate_reply
        elif path == "/oauth2/token":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            self.token_requests.append(form)
            status, body = self.token_replies[form["grant_type"]]
        elif path == "/helix/users":
            status, body = self.users_reply
        elif path == "/helix/chat/messages":
            self.sent.append(json.loads(request.content.decode()))
            status, body = self.send_reply
        else:
            return httpx.Response(404, json={"error": "Not Found"})

        if body is None:
            return httpx.Response(status)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


@pytest.fixture()
def twitch() -> FakeTwitch:
    return FakeTwitch()


@pytest.fixture()
def http(twitch: FakeTwitch) -> httpx.Client:
    client = httpx.Client(transport=httpx.MockTransport(twitch.handler))
    yield client
    client.close()


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    path = tmp_path / ".twitch-chat-env"
    path.write_text(BASE_STORE)
    return path


@pytest.fixture()
def make_session(store_path: Path, http: httpx.Client):
    """Build a session over the fake Twitch with a scripted redirect URL."""

    def factory(redirect_url: str = "http://localhost/?code=ABC123&scope=user%3Awrite%3Achat") -> Session:
        prompts: List[str] = []

        def prompt(text: str) -> str:
            prompts.append(text)
            return redirect_url

        session = Session(
            credentials=load_credentials(store_path),
            store_path=store_path,
            http=http,
            prompt=prompt,
            echo=lambda _line: None,
            open_url=lambda _url: True,
        )
        session.prompts = prompts  # type: ignore[attr-defined]
        return session

    return factory
