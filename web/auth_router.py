import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_session
from enums.runtime_environment import RuntimeEnvironment
from models.user import LoginRequest, UserDTO
from services.user import UserService
from web.dependencies import require_user

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@auth_router.post("/login")
async def login(payload: LoginRequest, response: Response, session: AsyncSession = Depends(get_session)):
    """
    Sign in with email and password.

    The session token is set as an HttpOnly cookie and also returned for
    clients that send it as a Bearer token.
    """
    user, token = await UserService.authenticate(payload.email, payload.password, session)
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=config.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=config.RUNTIME_ENVIRONMENT == RuntimeEnvironment.PROD,
        samesite="lax",
    )
    return {"user": user.model_dump(mode="json", by_alias=True), "token": token}


@auth_router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(key=config.SESSION_COOKIE_NAME)
    return {"success": True}


@auth_router.get("/me", response_model=UserDTO)
async def me(user: UserDTO = Depends(require_user)):
    return user
