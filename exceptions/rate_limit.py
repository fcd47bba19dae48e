"""
Rate limiting exceptions.
"""

from .base import StorefrontException


class RateLimitExceededException(StorefrontException):
    """Raised when a client exceeds its request budget for the current window."""

    def __init__(self, retry_after: int, limit: int | None = None):
        super().__init__(
            "Too many requests",
            details={'retry_after': retry_after, 'limit': limit}
        )
        self.retry_after = retry_after
        self.limit = limit
