"""
Custom exceptions for the storefront backend.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── ConfigurationException
├── CartException
│   ├── EmptyCartException
│   ├── CartProductNotFoundException
│   ├── ProductUnavailableException
│   ├── InvalidQuantityException
│   └── CartTooLargeException
├── ProductException
│   ├── ProductNotFoundException
│   ├── CategoryNotFoundException
│   ├── ProductSlugConflictException
│   └── WishlistItemNotFoundException
├── OrderException
│   ├── OrderNotFoundException
│   ├── InvalidOrderTransitionException
│   └── InvalidOrderUpdateException
├── PaymentException
│   ├── PaymentIntentRequiredException
│   ├── PaymentNotCompletedException
│   ├── PaymentAmountMismatchException
│   ├── InvalidPaymentMetadataException
│   ├── PaymentProviderException
│   └── WebhookSignatureException
├── UserException
│   ├── UserNotFoundException
│   ├── AuthenticationRequiredException
│   ├── InvalidCredentialsException
│   ├── AdminRequiredException
│   └── UserAlreadyExistsException
├── NotificationException
│   └── EmailDeliveryException
└── RateLimitExceededException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id=123)

The FastAPI exception handler in utils.error_handler turns them into
{"error": message} responses with the matching status code:
    try:
        await OrderManagementService.get_order(order_id, session)
    except OrderNotFoundException as e:
        ...  # 404 {"error": "Order not found"}
"""

from .base import StorefrontException, ConfigurationException
from .cart import (
    CartException,
    EmptyCartException,
    CartProductNotFoundException,
    ProductUnavailableException,
    InvalidQuantityException,
    CartTooLargeException
)
from .product import (
    ProductException,
    ProductNotFoundException,
    CategoryNotFoundException,
    ProductSlugConflictException,
    WishlistItemNotFoundException
)
from .order import OrderException, OrderNotFoundException, InvalidOrderTransitionException, InvalidOrderUpdateException
from .payment import (
    PaymentException,
    PaymentIntentRequiredException,
    PaymentNotCompletedException,
    PaymentAmountMismatchException,
    InvalidPaymentMetadataException,
    PaymentProviderException,
    WebhookSignatureException
)
from .user import (
    UserException,
    UserNotFoundException,
    AuthenticationRequiredException,
    InvalidCredentialsException,
    AdminRequiredException,
    UserAlreadyExistsException
)
from .notification import NotificationException, EmailDeliveryException
from .rate_limit import RateLimitExceededException

__all__ = [
    # Base
    'StorefrontException',
    'ConfigurationException',

    # Cart
    'CartException',
    'EmptyCartException',
    'CartProductNotFoundException',
    'ProductUnavailableException',
    'InvalidQuantityException',
    'CartTooLargeException',

    # Product
    'ProductException',
    'ProductNotFoundException',
    'CategoryNotFoundException',
    'ProductSlugConflictException',
    'WishlistItemNotFoundException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InvalidOrderTransitionException',
    'InvalidOrderUpdateException',

    # Payment
    'PaymentException',
    'PaymentIntentRequiredException',
    'PaymentNotCompletedException',
    'PaymentAmountMismatchException',
    'InvalidPaymentMetadataException',
    'PaymentProviderException',
    'WebhookSignatureException',

    # User
    'UserException',
    'UserNotFoundException',
    'AuthenticationRequiredException',
    'InvalidCredentialsException',
    'AdminRequiredException',
    'UserAlreadyExistsException',

    # Notification
    'NotificationException',
    'EmailDeliveryException',

    # Rate limiting
    'RateLimitExceededException',
]
