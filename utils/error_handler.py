"""
Error Handler Utility for the HTTP API

Provides centralized error handling for route handlers with:
- One JSON error shape: {"error": "<message>"}
- Automatic exception to status code mapping
- Provider details kept in the log, never in the response
- Correlation id in every error log line and X-Request-ID header

Usage:
    from utils.error_handler import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

Routes simply let StorefrontException subclasses propagate.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from exceptions import (
    StorefrontException,
    ConfigurationException,
    CartException,
    ProductNotFoundException,
    CategoryNotFoundException,
    ProductSlugConflictException,
    WishlistItemNotFoundException,
    OrderNotFoundException,
    InvalidOrderTransitionException,
    InvalidOrderUpdateException,
    PaymentException,
    PaymentProviderException,
    UserNotFoundException,
    AuthenticationRequiredException,
    InvalidCredentialsException,
    AdminRequiredException,
    UserAlreadyExistsException,
    EmailDeliveryException,
    RateLimitExceededException,
)
from middleware.request_context import REQUEST_ID_HEADER, get_request_id

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Most specific class wins; lookup walks the MRO so subclasses inherit
ERROR_STATUS_MAP: dict[type[StorefrontException], int] = {
    # Validation
    CartException: status.HTTP_400_BAD_REQUEST,
    PaymentException: status.HTTP_400_BAD_REQUEST,
    InvalidOrderUpdateException: status.HTTP_400_BAD_REQUEST,

    # Not found
    ProductNotFoundException: status.HTTP_404_NOT_FOUND,
    CategoryNotFoundException: status.HTTP_404_NOT_FOUND,
    WishlistItemNotFoundException: status.HTTP_404_NOT_FOUND,
    OrderNotFoundException: status.HTTP_404_NOT_FOUND,
    UserNotFoundException: status.HTTP_404_NOT_FOUND,

    # Auth
    AuthenticationRequiredException: status.HTTP_401_UNAUTHORIZED,
    InvalidCredentialsException: status.HTTP_401_UNAUTHORIZED,
    AdminRequiredException: status.HTTP_403_FORBIDDEN,

    # State / conflicts
    InvalidOrderTransitionException: status.HTTP_409_CONFLICT,
    ProductSlugConflictException: status.HTTP_409_CONFLICT,
    UserAlreadyExistsException: status.HTTP_409_CONFLICT,

    RateLimitExceededException: status.HTTP_429_TOO_MANY_REQUESTS,

    # Upstream / configuration
    PaymentProviderException: status.HTTP_502_BAD_GATEWAY,
    EmailDeliveryException: status.HTTP_502_BAD_GATEWAY,
    ConfigurationException: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_status_code(exception: StorefrontException) -> int:
    """
    Resolve the HTTP status for a domain exception.

    Unmapped StorefrontException subclasses fall back to 500.
    """
    for cls in type(exception).__mro__:
        if cls in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[cls]
    logger.error(f"Unmapped exception type: {type(exception).__name__}")
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(message: str, status_code: int, request_id: str | None = None,
                   headers: dict[str, str] | None = None) -> JSONResponse:
    response_headers = dict(headers or {})
    if request_id:
        response_headers[REQUEST_ID_HEADER] = request_id
    return JSONResponse(status_code=status_code, content={"error": message}, headers=response_headers)


def format_validation_error(exc: RequestValidationError) -> str:
    """
    First pydantic error as a short "field: message" string.

    The leading "body"/"query" location segment is dropped.
    """
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    message = first.get("msg", "Invalid value")
    if location:
        return f"Invalid {'.'.join(location)}: {message}"
    return f"Invalid request: {message}"


async def handle_service_error(request: Request, exception: StorefrontException) -> JSONResponse:
    """Convert a service exception into an {"error": ...} response."""
    request_id = get_request_id(request)
    status_code = get_status_code(exception)

    if status_code >= 500:
        logger.error(f"[{request_id}] {request.method} {request.url.path} -> {status_code}: {exception!r}")
    else:
        logger.warning(f"[{request_id}] {request.method} {request.url.path} -> {status_code}: {exception!r}")

    headers = None
    if isinstance(exception, RateLimitExceededException):
        headers = {"Retry-After": str(exception.retry_after)}

    return error_response(exception.message, status_code, request_id, headers)


async def handle_validation_error(request: Request, exception: RequestValidationError) -> JSONResponse:
    request_id = get_request_id(request)
    message = format_validation_error(exception)
    logger.warning(f"[{request_id}] {request.method} {request.url.path} -> 400: {message}")
    return error_response(message, status.HTTP_400_BAD_REQUEST, request_id)


async def handle_http_error(request: Request, exception: StarletteHTTPException) -> JSONResponse:
    request_id = get_request_id(request)
    message = exception.detail if isinstance(exception.detail, str) else "Request failed"
    return error_response(message, exception.status_code, request_id, getattr(exception, "headers", None))


async def handle_unexpected_error(request: Request, exception: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions (non-StorefrontException).

    Logs the full traceback; the client only gets a generic message and the
    correlation id.
    """
    request_id = get_request_id(request)
    logger.error(
        f"[{request_id}] Unexpected error on {request.method} {request.url.path}: "
        f"{type(exception).__name__} - {exception}",
        exc_info=exception
    )
    return error_response(INTERNAL_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR, request_id)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontException, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
