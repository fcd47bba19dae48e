from sqlalchemy import select, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush, session_refresh
from enums.product_status import ProductStatus
from models.category import Category
from models.product import Product, ProductImage, ProductDTO, ProductFilter, ProductImageDTO
from models.wishlistItem import WishlistItem


class ProductRepository:
    @staticmethod
    async def get_by_id(product_id: str, session: AsyncSession) -> ProductDTO | None:
        stmt = select(Product).where(Product.id == product_id)
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is not None:
            return ProductDTO.model_validate(product, from_attributes=True)
        return None

    @staticmethod
    async def get_by_ids(product_ids: list[str], session: AsyncSession) -> dict[str, ProductDTO]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(set(product_ids)))
        products = await session_execute(stmt, session)
        return {
            product.id: ProductDTO.model_validate(product, from_attributes=True)
            for product in products.scalars().all()
        }

    @staticmethod
    async def get_active(filters: ProductFilter, session: AsyncSession) -> list[ProductDTO]:
        stmt = select(Product).where(Product.status == ProductStatus.ACTIVE)

        if filters.category:
            stmt = stmt.join(Category, Product.category_id == Category.id).where(Category.slug == filters.category)
        if filters.featured:
            stmt = stmt.where(Product.featured.is_(True))
        if filters.q:
            pattern = f"%{filters.q.strip().lower()}%"
            stmt = stmt.where(or_(
                func.lower(Product.title).like(pattern),
                func.lower(Product.artist).like(pattern),
            ))

        stmt = stmt.order_by(Product.created_at.desc(), Product.id)
        if filters.limit:
            stmt = stmt.limit(filters.limit)

        products = await session_execute(stmt, session)
        return [ProductDTO.model_validate(p, from_attributes=True) for p in products.scalars().all()]

    @staticmethod
    async def slug_exists(slug: str, session: AsyncSession, exclude_id: str | None = None) -> bool:
        stmt = select(Product.id).where(Product.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        result = await session_execute(stmt, session)
        return result.first() is not None

    @staticmethod
    async def create(values: dict, images: list[ProductImageDTO], session: AsyncSession) -> ProductDTO:
        product = Product(**values)
        product.images = [
            ProductImage(url=image.url, alt=image.alt, position=image.position)
            for image in images
        ]
        session.add(product)
        await session_flush(session)
        await session_refresh(session, product)
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def update(product_id: str, values: dict, images: list[ProductImageDTO] | None,
                     session: AsyncSession) -> ProductDTO | None:
        product = await session.get(Product, product_id)
        if product is None:
            return None

        for key, value in values.items():
            setattr(product, key, value)

        if images is not None:
            # Replace the gallery wholesale, delete-orphan removes the old rows
            product.images = [
                ProductImage(url=image.url, alt=image.alt, position=image.position)
                for image in images
            ]

        await session_flush(session)
        await session_refresh(session, product)
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def delete(product_id: str, session: AsyncSession) -> bool:
        await session_execute(delete(WishlistItem).where(WishlistItem.product_id == product_id), session)
        await session_execute(delete(ProductImage).where(ProductImage.product_id == product_id), session)
        result = await session_execute(delete(Product).where(Product.id == product_id), session)
        return result.rowcount > 0

    @staticmethod
    async def count_by_status(status: ProductStatus, session: AsyncSession) -> int:
        stmt = select(func.count(Product.id)).where(Product.status == status)
        result = await session_execute(stmt, session)
        return result.scalar_one()
