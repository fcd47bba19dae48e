from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, DateTime, String, func
from sqlalchemy import Enum as SQLEnum

from enums.user_role import UserRole
from models.base import Base, ApiModel


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    password_hash = Column(String, nullable=True)  # pbkdf2_sha256$iterations$salt$hash
    role = Column(SQLEnum(UserRole, values_callable=lambda e: [m.value for m in e]),
                  nullable=False, default=UserRole.CUSTOMER)
    created_at = Column(DateTime, default=func.now())


class UserDTO(ApiModel):
    id: int | None = None
    email: str | None = None
    name: str | None = None
    role: UserRole | None = None
    created_at: datetime | None = None


class UserWithCredentialsDTO(BaseModel):
    """Internal only, never serialized to a response."""
    id: int
    email: str
    name: str | None = None
    role: UserRole
    password_hash: str | None = None


class LoginRequest(ApiModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=1024)
