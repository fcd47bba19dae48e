"""
Catalog and wishlist exceptions.
"""

from .base import StorefrontException


class ProductException(StorefrontException):
    """Base exception for catalog errors."""
    pass


class ProductNotFoundException(ProductException):
    def __init__(self, product_id: str):
        super().__init__(
            "Product not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class CategoryNotFoundException(ProductException):
    def __init__(self, category_id: int):
        super().__init__(
            "Category not found",
            details={'category_id': category_id}
        )
        self.category_id = category_id


class ProductSlugConflictException(ProductException):
    """Raised when a product title maps to a slug already in use."""

    def __init__(self, slug: str):
        super().__init__(
            f'A product with slug "{slug}" already exists',
            details={'slug': slug}
        )
        self.slug = slug


class WishlistItemNotFoundException(ProductException):
    def __init__(self, user_id: int, product_id: str):
        super().__init__(
            "Item not in wishlist",
            details={'user_id': user_id, 'product_id': product_id}
        )
        self.user_id = user_id
        self.product_id = product_id
