from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush, session_refresh
from models.wishlistItem import WishlistItem, WishlistItemDTO


class WishlistRepository:
    @staticmethod
    async def get_by_user(user_id: int, session: AsyncSession) -> list[WishlistItemDTO]:
        stmt = (
            select(WishlistItem)
            .where(WishlistItem.user_id == user_id)
            .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        )
        items = await session_execute(stmt, session)
        return [WishlistItemDTO.model_validate(i, from_attributes=True) for i in items.scalars().all()]

    @staticmethod
    async def get(user_id: int, product_id: str, session: AsyncSession) -> WishlistItemDTO | None:
        stmt = select(WishlistItem).where(
            WishlistItem.user_id == user_id,
            WishlistItem.product_id == product_id
        )
        item = await session_execute(stmt, session)
        item = item.scalar()
        if item is not None:
            return WishlistItemDTO.model_validate(item, from_attributes=True)
        return None

    @staticmethod
    async def create(user_id: int, product_id: str, session: AsyncSession) -> WishlistItemDTO:
        item = WishlistItem(user_id=user_id, product_id=product_id)
        session.add(item)
        await session_flush(session)
        await session_refresh(session, item)
        return WishlistItemDTO.model_validate(item, from_attributes=True)

    @staticmethod
    async def delete(user_id: int, product_id: str, session: AsyncSession) -> bool:
        stmt = delete(WishlistItem).where(
            WishlistItem.user_id == user_id,
            WishlistItem.product_id == product_id
        )
        result = await session_execute(stmt, session)
        return result.rowcount > 0
