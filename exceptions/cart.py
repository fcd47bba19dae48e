"""
Cart validation exceptions.

Messages name the offending item and are returned to the client as-is.
"""

from .base import StorefrontException


class CartException(StorefrontException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when the submitted cart is missing, not a list or empty."""

    def __init__(self):
        super().__init__("Cart is empty or invalid")


class CartProductNotFoundException(CartException):
    """Raised when a cart line references a product that does not exist."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class ProductUnavailableException(CartException):
    """Raised when a cart line references a product that is not active."""

    def __init__(self, product_id: str, title: str, status: str | None = None):
        super().__init__(
            f'Product "{title}" is no longer available',
            details={'product_id': product_id, 'status': status}
        )
        self.product_id = product_id
        self.title = title


class InvalidQuantityException(CartException):
    """Raised when a quantity is missing, not an integer or out of range."""

    def __init__(self, product_id: str, title: str, quantity=None):
        super().__init__(
            f'Invalid quantity for "{title}"',
            details={'product_id': product_id, 'quantity': quantity}
        )
        self.product_id = product_id
        self.title = title
        self.quantity = quantity


class CartTooLargeException(CartException):
    """Raised when the order snapshot does not fit the payment provider's metadata limits."""

    def __init__(self, line_count: int):
        super().__init__(
            "Cart is too large to check out in one order, please split it into smaller orders",
            details={'line_count': line_count}
        )
        self.line_count = line_count
