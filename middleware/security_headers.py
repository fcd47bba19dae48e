"""Security Headers Middleware

Adds security headers to API responses.

The storefront pages are served by a separate frontend; this service only
returns JSON, so the Content-Security-Policy is locked down completely.
Controlled by SECURITY_HEADERS_ENABLED (default on) and HSTS_ENABLED
(only behind HTTPS).
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

import config

API_CSP_DIRECTIVES = [
    "default-src 'none'",
    "frame-ancestors 'none'",
    "base-uri 'none'",
    "form-action 'none'",
]


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds security headers to all HTTP responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and add security headers to response.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            Response with security headers added
        """
        response = await call_next(request)

        if not config.SECURITY_HEADERS_ENABLED:
            return response

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=(), "
            "usb=(), magnetometer=(), gyroscope=()"
        )
        response.headers["Content-Security-Policy"] = "; ".join(API_CSP_DIRECTIVES)

        if config.HSTS_ENABLED:
            # 1 year
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response
