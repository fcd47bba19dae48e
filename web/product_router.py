import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from middleware.rate_limit import enforce_listing_rate_limit
from models.category import CategoryDTO
from models.product import ProductDTO, ProductFilter, ProductCreateRequest, ProductUpdateRequest
from models.user import UserDTO
from services.product import ProductService
from web.dependencies import require_admin

logger = logging.getLogger(__name__)

product_router = APIRouter(prefix="/api", tags=["products"])


@product_router.get("/products", response_model=list[ProductDTO],
                    dependencies=[Depends(enforce_listing_rate_limit)])
async def list_products(category: str | None = Query(default=None),
                        featured: bool | None = Query(default=None),
                        q: str | None = Query(default=None, max_length=200),
                        limit: int = Query(default=50, ge=1, le=100),
                        session: AsyncSession = Depends(get_session)):
    """Active products, newest first. Rate limited per client IP."""
    filters = ProductFilter(category=category, featured=featured, q=q, limit=limit)
    return await ProductService.list_active(filters, session)


@product_router.get("/products/{product_id}", response_model=ProductDTO)
async def get_product(product_id: str, session: AsyncSession = Depends(get_session)):
    return await ProductService.get_product(product_id, session)


@product_router.post("/products", status_code=status.HTTP_201_CREATED, response_model=ProductDTO)
async def create_product(payload: ProductCreateRequest,
                         session: AsyncSession = Depends(get_session),
                         admin: UserDTO = Depends(require_admin)):
    product = await ProductService.create_product(payload, session)
    logger.info(f"Admin {admin.id} created product {product.id}")
    return product


@product_router.put("/products/{product_id}", response_model=ProductDTO)
async def update_product(product_id: str, payload: ProductUpdateRequest,
                         session: AsyncSession = Depends(get_session),
                         admin: UserDTO = Depends(require_admin)):
    product = await ProductService.update_product(product_id, payload, session)
    logger.info(f"Admin {admin.id} updated product {product_id}")
    return product


@product_router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str,
                         session: AsyncSession = Depends(get_session),
                         admin: UserDTO = Depends(require_admin)):
    await ProductService.delete_product(product_id, session)
    logger.info(f"Admin {admin.id} deleted product {product_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@product_router.get("/categories", response_model=list[CategoryDTO])
async def list_categories(session: AsyncSession = Depends(get_session)):
    return await ProductService.list_categories(session)
