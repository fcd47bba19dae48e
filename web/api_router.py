"""
Miscellaneous API routes: health, newsletter signup and the admin email test.
"""

import logging
import os

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_session, check_database
from middleware.request_context import get_request_id
from models.base import ApiModel
from models.newsletter import NewsletterSubscribeRequest
from models.user import UserDTO
from services.newsletter import NewsletterService
from services.notification import NotificationService
from web.dependencies import require_admin

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api", tags=["api"])


class EmailTestRequest(ApiModel):
    to: str | None = Field(default=None, max_length=320)


@api_router.get("/health")
async def health_check(request: Request, session: AsyncSession = Depends(get_session)):
    """
    Health check for container monitoring.

    Reports database connectivity and which required environment variables
    are explicitly set. Defaults in config.py do not count, so a deployment
    running on a localhost SITE_URL shows up as degraded. Values are never
    included.

    Returns:
        200: healthy
        503: degraded (missing configuration) or unhealthy (database down)
    """
    correlation_id = get_request_id(request)
    try:
        database_ok = await check_database(session)
    except Exception as e:
        logger.error(f"[{correlation_id}] Health check: database unreachable: {e}")
        database_ok = False

    environment = {name: bool(os.environ.get(name)) for name in config.HEALTH_REQUIRED_ENV_VARS}

    if not database_ok:
        health = "unhealthy"
    elif not all(environment.values()):
        health = "degraded"
    else:
        health = "healthy"

    return JSONResponse(
        status_code=status.HTTP_200_OK if health == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": health,
            "database": "ok" if database_ok else "error",
            "environment": environment,
        },
    )


@api_router.post("/newsletter/subscribe")
async def subscribe(payload: NewsletterSubscribeRequest, session: AsyncSession = Depends(get_session)):
    return await NewsletterService.subscribe(payload, session)


@api_router.post("/email/test")
async def send_test_email(request: Request, payload: EmailTestRequest | None = None,
                          admin: UserDTO = Depends(require_admin)):
    """Send a test email and wait for the provider (admin only)."""
    correlation_id = get_request_id(request)
    recipient = (payload.to if payload and payload.to else None) or config.ADMIN_EMAIL or admin.email
    message_id = await NotificationService.send_test_email(recipient)
    logger.info(f"[{correlation_id}] Test email sent by admin {admin.id}")
    return {"success": True, "id": message_id}
