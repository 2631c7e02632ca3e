from __future__ import annotations

import httpx
import pytest

from twitch_chat.utils.errors import ResolutionFailure, SendFailure
from twitch_chat.utils.twitch_client import TwitchClient


@pytest.fixture()
def client(http: httpx.Client) -> TwitchClient:
    return TwitchClient(client_id="cid", oauth_token="oauth:tok", http=http)


def test_api_call_sends_bearer_and_client_id() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["headers"] = {k.lower(): v for k, v in request.headers.items()}
        return httpx.Response(200, json={"data": [{"id": "42"}]})

    with httpx.Client(transport=httpx.MockTransport(handler)) as http:
        user_id = TwitchClient(client_id="cid", oauth_token="oauth:tok", http=http).get_user_id()

    assert user_id == "42"
    assert captured["headers"]["authorization"] == "Bearer tok"
    assert captured["headers"]["client-id"] == "cid"


def test_get_user_id_without_data_raises(client: TwitchClient, twitch) -> None:
    twitch.users_reply = (401, {"error": "Unauthorized", "status": 401, "message": "Invalid OAuth token"})

    with pytest.raises(ResolutionFailure):
        client.get_user_id()


def test_send_204_is_success(client: TwitchClient, twitch) -> None:
    client.send_chat_message("1234", 'hello "chat"')

    assert twitch.sent == [{"broadcaster_id": "1234", "sender_id": "1234", "message": 'hello "chat"'}]


def test_send_200_with_is_sent_is_success(client: TwitchClient, twitch) -> None:
    twitch.send_reply = (200, {"data": [{"message_id": "abc", "is_sent": True}]})

    client.send_chat_message("1234", "hi")


def test_send_400_surfaces_body(client: TwitchClient, twitch) -> None:
    twitch.send_reply = (400, {"error": "Bad Request", "status": 400, "message": "The message field is required"})

    with pytest.raises(SendFailure) as excinfo:
        client.send_chat_message("1234", "")

    assert excinfo.value.status_code == 400
    assert "The message field is required" in excinfo.value.body
    assert "The message field is required" in str(excinfo.value)


def test_send_dropped_message_is_failure(client: TwitchClient, twitch) -> None:
    twitch.send_reply = (
        200,
        {"data": [{"message_id": "", "is_sent": False, "drop_reason": {"code": "msg_duplicate", "message": "Your message is identical"}}]},
    )

    with pytest.raises(SendFailure, match="identical"):
        client.send_chat_message("1234", "hi")
