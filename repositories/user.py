from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.user_role import UserRole
from models.user import User, UserDTO, UserWithCredentialsDTO


class UserRepository:
    @staticmethod
    async def get_by_id(user_id: int, session: AsyncSession) -> UserDTO | None:
        user = await session.get(User, user_id)
        if user is not None:
            return UserDTO.model_validate(user, from_attributes=True)
        return None

    @staticmethod
    async def get_by_email(email: str, session: AsyncSession) -> UserDTO | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is not None:
            return UserDTO.model_validate(user, from_attributes=True)
        return None

    @staticmethod
    async def get_credentials_by_email(email: str, session: AsyncSession) -> UserWithCredentialsDTO | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is not None:
            return UserWithCredentialsDTO.model_validate(user, from_attributes=True)
        return None

    @staticmethod
    async def create(email: str, name: str | None, password_hash: str | None, role: UserRole,
                     session: AsyncSession) -> int:
        user = User(email=email.strip().lower(), name=name, password_hash=password_hash, role=role)
        session.add(user)
        await session_flush(session)
        return user.id

    @staticmethod
    async def update_credentials(user_id: int, password_hash: str, role: UserRole, session: AsyncSession) -> None:
        user = await session.get(User, user_id)
        user.password_hash = password_hash
        user.role = role
        await session_flush(session)
