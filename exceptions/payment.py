"""
Payment-related exceptions.
"""

from .base import StorefrontException


class PaymentException(StorefrontException):
    """Base exception for payment-related errors."""
    pass


class PaymentIntentRequiredException(PaymentException):
    def __init__(self):
        super().__init__("Payment Intent ID required")


class PaymentNotCompletedException(PaymentException):
    """Raised when an order is requested for an intent that has not succeeded."""

    def __init__(self, payment_intent_id: str, status: str):
        super().__init__(
            "Payment not completed",
            details={'payment_intent_id': payment_intent_id, 'status': status}
        )
        self.payment_intent_id = payment_intent_id
        self.status = status


class PaymentAmountMismatchException(PaymentException):
    """Raised when the charged amount disagrees with the order snapshot."""

    def __init__(self, payment_intent_id: str, charged: int, expected: int):
        super().__init__(
            "Payment amount does not match order total",
            details={'payment_intent_id': payment_intent_id, 'charged': charged, 'expected': expected}
        )
        self.payment_intent_id = payment_intent_id
        self.charged = charged
        self.expected = expected


class InvalidPaymentMetadataException(PaymentException):
    """Raised when the order snapshot stored on the intent cannot be read."""

    def __init__(self, payment_intent_id: str, reason: str):
        super().__init__(
            "Payment is missing order details",
            details={'payment_intent_id': payment_intent_id, 'reason': reason}
        )
        self.payment_intent_id = payment_intent_id
        self.reason = reason


class PaymentProviderException(PaymentException):
    """
    Raised when the payment provider rejects or fails a call.

    The client only sees the generic message; detail is for the log.
    """

    def __init__(self, operation: str, detail: str | None = None):
        super().__init__(
            "Payment provider unavailable",
            details={'operation': operation, 'detail': detail}
        )
        self.operation = operation
        self.detail = detail


class WebhookSignatureException(PaymentException):
    """Raised when a webhook signature is missing or does not verify."""

    def __init__(self, reason: str = "Invalid signature"):
        super().__init__(reason)
        self.reason = reason
