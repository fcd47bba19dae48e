import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit, session_rollback
from email_api.EmailApiWrapper import EmailApiWrapper
from models.newsletter import NewsletterSubscribeRequest
from repositories.newsletter import NewsletterRepository
from services.notification import NotificationService

logger = logging.getLogger(__name__)


class NewsletterService:

    @staticmethod
    async def subscribe(request: NewsletterSubscribeRequest, session: AsyncSession) -> dict:
        """
        Store a subscriber and queue the welcome email.

        Subscribing twice is harmless. Without email delivery configured the
        request is acknowledged with skipped=True and nothing is stored.
        """
        if not EmailApiWrapper.is_configured():
            logger.warning("Newsletter signup skipped: email delivery not configured")
            return {"success": True, "skipped": True}

        existing = await NewsletterRepository.get_by_email(request.email, session)
        if existing is not None:
            return {"success": True, "alreadySubscribed": True}

        try:
            await NewsletterRepository.create(request.email, request.first_name, session)
            await session_commit(session)
        except IntegrityError:
            await session_rollback(session)
            return {"success": True, "alreadySubscribed": True}

        NotificationService.welcome(request.email, request.first_name)
        logger.info("Newsletter subscriber added")
        return {"success": True}
