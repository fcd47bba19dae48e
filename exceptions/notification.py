"""
Email delivery exceptions.
"""

from .base import StorefrontException


class NotificationException(StorefrontException):
    """Base exception for outbound notification errors."""
    pass


class EmailDeliveryException(NotificationException):
    """Raised by the email wrapper when the provider rejects or times out."""

    def __init__(self, recipient: str, detail: str, status_code: int | None = None):
        super().__init__(
            "Email delivery failed",
            details={'status_code': status_code, 'detail': detail}
        )
        self.recipient = recipient
        self.detail = detail
        self.status_code = status_code
