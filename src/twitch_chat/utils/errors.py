"""
Error types for the token lifecycle and chat send.

Fatal errors propagate to the command line, which prints them and exits
non-zero. ValidationFailure and ScopeFailure are recovered inside the
lifecycle manager by refreshing or reauthorizing.
"""


class TwitchChatError(Exception):
    """Base class for every error this tool reports."""


class ConfigError(TwitchChatError):
    """The credential store is missing or incomplete."""


class ExtractionFailure(TwitchChatError):
    """No authorization code could be found in the pasted redirect URL."""


class ExchangeFailure(TwitchChatError):
    """The token endpoint returned no access token for an authorization code."""

    def __init__(self, response_text: str):
        super().__init__(f"Failed to get auth token. Response: {response_text}")
        self.response_text = response_text


class ValidationFailure(TwitchChatError):
    """The stored token was rejected by the validation endpoint."""


class ScopeFailure(TwitchChatError):
    """The stored token is valid but lacks a required scope."""

    def __init__(self, missing: list[str]):
        super().__init__(f"Token lacks required scopes: {', '.join(missing)}")
        self.missing = missing


class ResolutionFailure(TwitchChatError):
    """The user lookup returned no broadcaster ID."""


class SendFailure(TwitchChatError):
    """Twitch refused the chat message."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Failed to send the message: {body}")
        self.status_code = status_code
        self.body = body
