"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.category import Category
from models.product import Product, ProductImage
from models.user import User
from models.order import Order
from models.orderItem import OrderItem
from models.wishlistItem import WishlistItem
from models.newsletter import NewsletterSubscriber

__all__ = [
    'Base',
    'Category',
    'Product',
    'ProductImage',
    'User',
    'Order',
    'OrderItem',
    'WishlistItem',
    'NewsletterSubscriber',
]
