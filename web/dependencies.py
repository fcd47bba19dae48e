"""
Request dependencies shared by the routers: session claims and role checks.

A session token is read from the session cookie first, then from an
``Authorization: Bearer`` header.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_session
from enums.user_role import UserRole
from exceptions.user import AdminRequiredException
from models.user import UserDTO
from services.user import UserService
from utils.session_token import SessionClaims


def get_session_token(request: Request) -> str | None:
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_session_claims(request: Request) -> SessionClaims | None:
    return UserService.read_session(get_session_token(request))


def get_optional_user_id(claims: SessionClaims | None = Depends(get_session_claims)) -> int | None:
    """Signed-in user id, None for guests. Never fails."""
    return claims.user_id if claims is not None else None


async def require_user(claims: SessionClaims | None = Depends(get_session_claims),
                       session: AsyncSession = Depends(get_session)) -> UserDTO:
    return await UserService.get_current_user(claims, session)


async def require_admin(user: UserDTO = Depends(require_user)) -> UserDTO:
    if user.role != UserRole.ADMIN:
        raise AdminRequiredException(user.id)
    return user
