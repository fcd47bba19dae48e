import logging

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from enums.user_role import UserRole
from exceptions.user import InvalidCredentialsException, UserAlreadyExistsException, AuthenticationRequiredException
from models.user import UserDTO
from repositories.user import UserRepository
from services.encryption import EncryptionService
from utils.session_token import create_session_token, verify_session_token, SessionTokenError, SessionClaims

logger = logging.getLogger(__name__)


class UserService:

    @staticmethod
    async def authenticate(email: str, password: str, session: AsyncSession) -> tuple[UserDTO, str]:
        """
        Check credentials and issue a session token.

        Returns:
            (user, token)

        Raises:
            InvalidCredentialsException: Unknown email or wrong password (same message for both)
        """
        credentials = await UserRepository.get_credentials_by_email(email, session)
        if credentials is None or not EncryptionService.verify_password(password, credentials.password_hash):
            logger.warning("Failed login attempt")
            raise InvalidCredentialsException()

        token = create_session_token(
            credentials.id,
            credentials.role,
            config.SESSION_SECRET,
            config.SESSION_MAX_AGE_SECONDS
        )
        logger.info(f"User {credentials.id} signed in ({credentials.role.value})")
        user = await UserRepository.get_by_id(credentials.id, session)
        return user, token

    @staticmethod
    def read_session(token: str | None) -> SessionClaims | None:
        """Claims of a valid token, None for a missing or bad one."""
        if not token:
            return None
        try:
            return verify_session_token(token, config.SESSION_SECRET)
        except SessionTokenError as e:
            logger.debug(f"Ignoring session token: {e}")
            return None

    @staticmethod
    async def get_current_user(claims: SessionClaims | None, session: AsyncSession) -> UserDTO:
        if claims is None:
            raise AuthenticationRequiredException()
        user = await UserRepository.get_by_id(claims.user_id, session)
        if user is None:
            # Token outlived its account
            raise AuthenticationRequiredException()
        return user

    @staticmethod
    async def create_user(email: str, password: str, name: str | None, role: UserRole,
                          session: AsyncSession, update_existing: bool = False) -> int:
        """
        Create an account (used by scripts/create_admin.py).

        With update_existing the password and role of an existing account are reset.
        """
        password_hash = EncryptionService.hash_password(password)
        existing = await UserRepository.get_by_email(email, session)
        if existing is not None:
            if not update_existing:
                raise UserAlreadyExistsException(email)
            await UserRepository.update_credentials(existing.id, password_hash, role, session)
            await session_commit(session)
            logger.info(f"User {existing.id} credentials reset ({role.value})")
            return existing.id

        user_id = await UserRepository.create(email, name, password_hash, role, session)
        await session_commit(session)
        logger.info(f"User {user_id} created ({role.value})")
        return user_id
