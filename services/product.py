import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from exceptions.product import ProductNotFoundException, CategoryNotFoundException, ProductSlugConflictException
from models.category import CategoryDTO
from models.product import ProductDTO, ProductFilter, ProductCreateRequest, ProductUpdateRequest, ProductImageDTO
from repositories.category import CategoryRepository
from repositories.product import ProductRepository
from utils.money import quantize_money
from utils.slug import slugify

logger = logging.getLogger(__name__)


class ProductService:

    @staticmethod
    async def list_active(filters: ProductFilter, session: AsyncSession) -> list[ProductDTO]:
        return await ProductRepository.get_active(filters, session)

    @staticmethod
    async def get_product(product_id: str, session: AsyncSession) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def list_categories(session: AsyncSession) -> list[CategoryDTO]:
        return await CategoryRepository.get_all(session)

    @staticmethod
    def _normalize_images(images: list[ProductImageDTO], title: str) -> list[ProductImageDTO]:
        """Gallery order follows list order; alt text defaults to the title."""
        return [
            ProductImageDTO(url=image.url, alt=image.alt or title, position=index)
            for index, image in enumerate(images)
        ]

    @staticmethod
    async def _check_category(category_id: int | None, session: AsyncSession):
        if category_id is not None and await CategoryRepository.get_by_id(category_id, session) is None:
            raise CategoryNotFoundException(category_id)

    @staticmethod
    async def create_product(request: ProductCreateRequest, session: AsyncSession) -> ProductDTO:
        """
        Create a catalog entry; the slug is derived from the title.

        Raises:
            CategoryNotFoundException: Unknown category id
            ProductSlugConflictException: Another product already uses the slug
        """
        await ProductService._check_category(request.category_id, session)

        slug = slugify(request.title)
        if await ProductRepository.slug_exists(slug, session):
            raise ProductSlugConflictException(slug)

        values = request.model_dump(exclude={'images'})
        values['slug'] = slug
        values['price'] = quantize_money(request.price)

        product = await ProductRepository.create(
            values,
            ProductService._normalize_images(request.images, request.title),
            session
        )
        await session_commit(session)
        logger.info(f"Product {product.id} created: '{product.title}' ({product.status.value})")
        return product

    @staticmethod
    async def update_product(product_id: str, request: ProductUpdateRequest, session: AsyncSession) -> ProductDTO:
        """
        Update the fields present in the request. A new title re-derives the
        slug; a new image list replaces the gallery.
        """
        current = await ProductService.get_product(product_id, session)

        values = request.model_dump(exclude_unset=True, exclude={'images'})
        if 'category_id' in values:
            await ProductService._check_category(values['category_id'], session)
        if 'price' in values:
            if values['price'] is None:
                del values['price']
            else:
                values['price'] = quantize_money(values['price'])
        for required in ('title', 'status', 'featured'):
            if required in values and values[required] is None:
                del values[required]
        if 'title' in values and values['title'] != current.title:
            slug = slugify(values['title'])
            if await ProductRepository.slug_exists(slug, session, exclude_id=product_id):
                raise ProductSlugConflictException(slug)
            values['slug'] = slug

        images = None
        if request.images is not None:
            images = ProductService._normalize_images(request.images, values.get('title', current.title))

        product = await ProductRepository.update(product_id, values, images, session)
        await session_commit(session)
        logger.info(f"Product {product_id} updated: {sorted(values)}{' +images' if images is not None else ''}")
        return product

    @staticmethod
    async def delete_product(product_id: str, session: AsyncSession) -> None:
        deleted = await ProductRepository.delete(product_id, session)
        if not deleted:
            raise ProductNotFoundException(product_id)
        await session_commit(session)
        logger.info(f"Product {product_id} deleted")
