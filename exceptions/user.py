"""
User and authentication exceptions.
"""

from .base import StorefrontException


class UserException(StorefrontException):
    """Base exception for user-related errors."""
    pass


class UserNotFoundException(UserException):
    def __init__(self, user_id: int | None = None, email: str | None = None):
        super().__init__(
            "User not found",
            details={'user_id': user_id}
        )
        self.user_id = user_id
        self.email = email


class AuthenticationRequiredException(UserException):
    """Raised when a route needs a session and none (or an invalid one) was sent."""

    def __init__(self):
        super().__init__("Unauthorized")


class InvalidCredentialsException(UserException):
    def __init__(self):
        super().__init__("Invalid email or password")


class AdminRequiredException(UserException):
    """Raised when a signed-in non-admin calls an admin route."""

    def __init__(self, user_id: int | None = None):
        super().__init__("Forbidden", details={'user_id': user_id})
        self.user_id = user_id


class UserAlreadyExistsException(UserException):
    def __init__(self, email: str):
        super().__init__("User already exists")
        self.email = email
