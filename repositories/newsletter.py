from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.newsletter import NewsletterSubscriber, NewsletterSubscriberDTO


class NewsletterRepository:
    @staticmethod
    async def get_by_email(email: str, session: AsyncSession) -> NewsletterSubscriberDTO | None:
        stmt = select(NewsletterSubscriber).where(NewsletterSubscriber.email == email)
        subscriber = await session_execute(stmt, session)
        subscriber = subscriber.scalar()
        if subscriber is not None:
            return NewsletterSubscriberDTO.model_validate(subscriber, from_attributes=True)
        return None

    @staticmethod
    async def create(email: str, first_name: str | None, session: AsyncSession) -> int:
        subscriber = NewsletterSubscriber(email=email, first_name=first_name)
        session.add(subscriber)
        await session_flush(session)
        return subscriber.id
