"""Exceptions raised by the platform adapters and the token broker."""


class UpstreamError(Exception):
    """An upstream platform call did not succeed."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status
        self.message = message


class TokenBrokerError(UpstreamError):
    """The Twitch app token could not be obtained."""


class CredentialsMissing(TokenBrokerError):
    """Client id or secret is not configured."""

    def __init__(self, message: str = "twitch credentials missing"):
        super().__init__(message, status=None)


class UpstreamAuthFailure(TokenBrokerError):
    """The client-credentials exchange was rejected."""

    def __init__(self, status: int | None, body: str | None = None):
        detail = f" {body}" if body else ""
        shown = status if status is not None else "network"
        super().__init__(f"twitch token fetch failed: {shown}{detail}", status=status)
        self.body = body


class UnsupportedChannelUrl(ValueError):
    """A channel URL is not a recognised YouTube channel location."""


class ChannelNotFound(LookupError):
    """Handle resolution found no matching channel."""
