from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.category import Category, CategoryDTO


class CategoryRepository:
    @staticmethod
    async def get_all(session: AsyncSession) -> list[CategoryDTO]:
        stmt = select(Category).order_by(Category.name)
        categories = await session_execute(stmt, session)
        return [CategoryDTO.model_validate(c, from_attributes=True) for c in categories.scalars().all()]

    @staticmethod
    async def get_by_id(category_id: int, session: AsyncSession) -> CategoryDTO | None:
        category = await session.get(Category, category_id)
        if category is not None:
            return CategoryDTO.model_validate(category, from_attributes=True)
        return None

    @staticmethod
    async def get_by_slug(slug: str, session: AsyncSession) -> CategoryDTO | None:
        stmt = select(Category).where(Category.slug == slug)
        category = await session_execute(stmt, session)
        category = category.scalar()
        if category is not None:
            return CategoryDTO.model_validate(category, from_attributes=True)
        return None

    @staticmethod
    async def create(category_dto: CategoryDTO, session: AsyncSession) -> int:
        category = Category(**category_dto.model_dump(exclude={'id'}))
        session.add(category)
        await session_flush(session)
        return category.id
