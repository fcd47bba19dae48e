"""
Order-related exceptions.
"""

from .base import StorefrontException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found in database."""

    def __init__(self, order_id: int):
        super().__init__(
            "Order not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InvalidOrderTransitionException(OrderException):
    """Raised when an admin requests a status change the state machine forbids."""

    def __init__(self, order_id: int | None, current_state: str, requested_state: str):
        super().__init__(
            f"Cannot change order status from {current_state} to {requested_state}",
            details={
                'order_id': order_id,
                'current_state': current_state,
                'requested_state': requested_state
            }
        )
        self.order_id = order_id
        self.current_state = current_state
        self.requested_state = requested_state


class InvalidOrderUpdateException(OrderException):
    """Raised when an update request carries nothing to change or bad values."""

    def __init__(self, reason: str, order_id: int | None = None):
        super().__init__(reason, details={'order_id': order_id})
        self.order_id = order_id
        self.reason = reason
