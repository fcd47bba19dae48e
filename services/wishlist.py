import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit, session_rollback
from exceptions.product import ProductNotFoundException, WishlistItemNotFoundException
from models.wishlistItem import WishlistItemDTO
from repositories.product import ProductRepository
from repositories.wishlist import WishlistRepository

logger = logging.getLogger(__name__)


class WishlistService:

    @staticmethod
    async def get_wishlist(user_id: int, session: AsyncSession) -> list[WishlistItemDTO]:
        return await WishlistRepository.get_by_user(user_id, session)

    @staticmethod
    async def add(user_id: int, product_id: str, session: AsyncSession) -> tuple[WishlistItemDTO, bool]:
        """
        Add a product to the user's wishlist.

        Returns:
            (item, created) - created is False if it was already there
        """
        existing = await WishlistRepository.get(user_id, product_id, session)
        if existing is not None:
            return existing, False

        if await ProductRepository.get_by_id(product_id, session) is None:
            raise ProductNotFoundException(product_id)

        try:
            item = await WishlistRepository.create(user_id, product_id, session)
            await session_commit(session)
        except IntegrityError:
            # Double click raced us to the unique (user, product) pair
            await session_rollback(session)
            existing = await WishlistRepository.get(user_id, product_id, session)
            if existing is None:
                raise
            return existing, False

        logger.info(f"User {user_id} added product {product_id} to wishlist")
        return item, True

    @staticmethod
    async def remove(user_id: int, product_id: str, session: AsyncSession) -> None:
        removed = await WishlistRepository.delete(user_id, product_id, session)
        if not removed:
            raise WishlistItemNotFoundException(user_id, product_id)
        await session_commit(session)
        logger.info(f"User {user_id} removed product {product_id} from wishlist")
