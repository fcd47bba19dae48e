"""
Signed session tokens.

Stateless tokens carried in the session cookie or an Authorization: Bearer
header. Layout:

    base64url(JSON {"uid": ..., "role": ..., "exp": ...}) + "." + hex HMAC-SHA256

Security features:
- HMAC-SHA256 signature over the encoded payload
- Expiry check (exp, unix seconds)
- Constant-time signature comparison
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass

from enums.user_role import UserRole

logger = logging.getLogger(__name__)


class SessionTokenError(Exception):
    """Raised when a session token is missing, malformed, forged or expired."""
    pass


@dataclass(frozen=True)
class SessionClaims:
    user_id: int
    role: UserRole
    expires_at: int


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _sign(payload: str, secret: str) -> str:
    return hmac.new(
        key=secret.encode("utf-8"),
        msg=payload.encode("ascii"),
        digestmod=hashlib.sha256
    ).hexdigest()


def create_session_token(user_id: int, role: UserRole, secret: str, max_age_seconds: int,
                         now: float | None = None) -> str:
    """
    Issue a signed token valid for max_age_seconds.

    Raises:
        SessionTokenError: If no secret is configured
    """
    if not secret:
        raise SessionTokenError("Session secret not configured")

    issued_at = int(now if now is not None else time.time())
    claims = {"uid": user_id, "role": role.value, "exp": issued_at + max_age_seconds}
    payload = _b64encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    return f"{payload}.{_sign(payload, secret)}"


def verify_session_token(token: str, secret: str, now: float | None = None) -> SessionClaims:
    """
    Validate a token and return its claims.

    Raises:
        SessionTokenError: If validation fails
    """
    if not token:
        raise SessionTokenError("No token provided")
    if not secret:
        raise SessionTokenError("Session secret not configured")

    payload, separator, signature = token.partition(".")
    if not separator or not payload or not signature:
        raise SessionTokenError("Malformed token")

    if not hmac.compare_digest(_sign(payload, secret), signature):
        logger.warning("Session token signature mismatch")
        raise SessionTokenError("Invalid signature")

    try:
        claims = json.loads(_b64decode(payload))
        user_id = int(claims["uid"])
        role = UserRole(claims["role"])
        expires_at = int(claims["exp"])
    except (ValueError, KeyError, TypeError) as e:
        raise SessionTokenError(f"Malformed claims: {e}")

    current = now if now is not None else time.time()
    if current >= expires_at:
        raise SessionTokenError("Token expired")

    return SessionClaims(user_id=user_id, role=role, expires_at=expires_at)
