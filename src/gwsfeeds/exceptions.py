class GoogleSheetsFeedError(Exception):
    """Base class for everything raised by this package."""


class MissingConfigurationError(GoogleSheetsFeedError, ValueError):
    """Raised when a required key, link or credential is not available."""


class AuthorizationError(GoogleSheetsFeedError):
    """Raised when the feed rejects the supplied credentials."""


class PrivateSheetError(AuthorizationError):
    """Raised when an unauthenticated request lands on a login page."""


class FeedHTTPError(GoogleSheetsFeedError):
    """Raised when the feed answers with an HTTP error status."""

    def __init__(self, status_code: int, reason: str, body: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"HTTP error {status_code}: {reason} {body!r}")


class FeedParseError(GoogleSheetsFeedError):
    """Raised when a feed response body is not well formed XML."""


class EmptyResponseError(GoogleSheetsFeedError):
    """Raised when a feed call that must return data returned no body."""
