"""Exception types raised by the review engine.

Validation errors are raised before any network call. Remote errors wrap
failed HTTP exchanges with the persistence or voice APIs. Media errors
belong to the player. Timeouts come from polling for derived assets.
"""


class ReviewError(Exception):
    """Base class for all review-engine errors."""


class ValidationError(ReviewError):
    """Missing context or a malformed record; nothing was sent."""


class RemoteError(ReviewError):
    """A remote call failed or returned an error payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AssetTimeoutError(RemoteError):
    """Polling for a derived audio/video asset exceeded its bound."""


class MediaError(ReviewError):
    """A media element failed to load or play."""
