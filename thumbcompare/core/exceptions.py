"""Custom exceptions for the competitor feed pipeline."""


class ThumbCompareError(Exception):
    """Base exception for ThumbCompare errors."""

    pass


class MissingCredentialError(ThumbCompareError):
    """No YouTube API key is configured."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message or "Missing API key. Set it in Settings before fetching competitors."
        )


class InvalidHandleError(ThumbCompareError):
    """A channel reference could not be resolved to a channel."""

    def __init__(self, handle: str):
        self.handle = handle
        super().__init__(f"Could not resolve handle: @{handle.lstrip('@')}")


class UpstreamResponseError(ThumbCompareError):
    """YouTube API answered with a non-2xx status or an unreadable body."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"YouTube API error ({status_code}): {body}")


class NetworkError(ThumbCompareError):
    """Transport-level failure talking to the YouTube API."""

    pass
