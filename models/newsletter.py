from datetime import datetime

from pydantic import Field, field_validator
from sqlalchemy import Column, Integer, String, DateTime, func

from models.base import Base, ApiModel


class NewsletterSubscriber(Base):
    __tablename__ = 'newsletter_subscribers'

    id = Column(Integer, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    first_name = Column(String, nullable=True)
    subscribed_at = Column(DateTime, default=func.now())


class NewsletterSubscriberDTO(ApiModel):
    id: int | None = None
    email: str | None = None
    first_name: str | None = None
    subscribed_at: datetime | None = None


class NewsletterSubscribeRequest(ApiModel):
    email: str = Field(min_length=3, max_length=320)
    first_name: str | None = Field(default=None, max_length=100)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = value.strip().lower()
        local, _, domain = value.partition('@')
        if not local or '.' not in domain:
            raise ValueError('Invalid email address')
        return value
