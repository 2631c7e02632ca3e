"""
Twitch Helix API wrapper: user lookup and chat send.
"""

from dataclasses import dataclass

import httpx

from .errors import ResolutionFailure, SendFailure
from .logger import get_logger

logger = get_logger("twitch_client")

USERS_URL = "https://api.twitch.tv/helix/users"
CHAT_MESSAGES_URL = "https://api.twitch.tv/helix/chat/messages"


@dataclass
class TwitchClient:
    """Wrapper for the Helix endpoints used to post to chat."""

    client_id: str
    oauth_token: str
    http: httpx.Client

    def _api_call(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Make an authenticated Helix call."""
        headers = {
            "Client-Id": self.client_id,
            "Authorization": f"Bearer {self.oauth_token.replace('oauth:', '')}",
            **kwargs.pop("headers", {}),
        }
        resp = self.http.request(method, url, headers=headers, **kwargs)
        if resp.status_code >= 400:
            logger.debug(f"API call to {url} failed: {resp.status_code} - {resp.text[:200]}")
        return resp

    def get_user_id(self) -> str:
        """Get the authenticated user's ID."""
        resp = self._api_call("GET", USERS_URL)
        try:
            data = resp.json()
        except ValueError:
            data = {}
        users = data.get("data") if isinstance(data, dict) else None
        if not users or not users[0].get("id"):
            raise ResolutionFailure("Failed to fetch Broadcaster ID")
        return users[0]["id"]

    def send_chat_message(self, broadcaster_id: str, message: str) -> None:
        """
        Post a chat message as the broadcaster.

        Twitch answers 200 with a body, or 204 without one. A 200 can still
        report the message as dropped (e.g. by AutoMod), which counts as failure.
        """
        logger.debug(f"Sending message: {message}")
        resp = self._api_call(
            "POST",
            CHAT_MESSAGES_URL,
            json={
                "broadcaster_id": broadcaster_id,
                "sender_id": broadcaster_id,
                "message": message,
            },
        )
        logger.debug(f"HTTP Code: {resp.status_code}")
        logger.debug(f"Response: {resp.text}")

        if resp.status_code not in (200, 204):
            raise SendFailure(resp.status_code, resp.text)

        if resp.status_code == 200 and resp.content:
            try:
                sent = resp.json().get("data") or []
            except (ValueError, AttributeError):
                sent = []
            if sent and sent[0].get("is_sent") is False:
                reason = (sent[0].get("drop_reason") or {}).get("message", "message was dropped")
                raise SendFailure(resp.status_code, reason)
