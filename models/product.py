import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import Field
from sqlalchemy import Column, String, Text, Numeric, Boolean, Integer, DateTime, ForeignKey, func, CheckConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.product_status import ProductStatus
from models.base import Base, ApiModel, Money
from models.category import CategoryDTO


def generate_product_id() -> str:
    return uuid.uuid4().hex


class Product(Base):
    __tablename__ = 'products'

    id = Column(String(64), primary_key=True, default=generate_product_id)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    status = Column(SQLEnum(ProductStatus, values_callable=lambda e: [m.value for m in e]),
                    nullable=False, default=ProductStatus.DRAFT)
    featured = Column(Boolean, nullable=False, default=False)

    # Provenance details shown on the product page
    condition = Column(String, nullable=True)
    year = Column(String, nullable=True)
    artist = Column(String, nullable=True)
    medium = Column(String, nullable=True)
    period = Column(String, nullable=True)

    category_id = Column(Integer, ForeignKey('categories.id'), nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relations (eager, async sessions can't lazy load)
    category = relationship('Category', back_populates='products', lazy='joined')
    images = relationship('ProductImage', back_populates='product', lazy='selectin',
                          order_by='ProductImage.position', cascade='all, delete-orphan')

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
    )


class ProductImage(Base):
    __tablename__ = 'product_images'

    id = Column(Integer, primary_key=True)
    product_id = Column(String(64), ForeignKey('products.id', ondelete='CASCADE'), nullable=False)
    url = Column(String, nullable=False)
    alt = Column(String, nullable=True)
    position = Column(Integer, nullable=False, default=0)

    product = relationship('Product', back_populates='images')


class ProductImageDTO(ApiModel):
    url: str
    alt: str | None = None
    position: int = 0


class ProductDTO(ApiModel):
    id: str | None = None
    title: str | None = None
    slug: str | None = None
    description: str | None = None
    price: Money | None = None
    status: ProductStatus | None = None
    featured: bool | None = None
    condition: str | None = None
    year: str | None = None
    artist: str | None = None
    medium: str | None = None
    period: str | None = None
    category_id: int | None = None
    category: CategoryDTO | None = None
    images: list[ProductImageDTO] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductFilter(ApiModel):
    """Query filters accepted by the public listing."""
    category: str | None = None
    featured: bool | None = None
    q: str | None = None
    limit: int | None = Field(default=None, ge=1, le=100)


class ProductCreateRequest(ApiModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    status: ProductStatus = ProductStatus.DRAFT
    featured: bool = False
    condition: str | None = None
    year: str | None = None
    artist: str | None = None
    medium: str | None = None
    period: str | None = None
    category_id: int | None = None
    images: list[ProductImageDTO] = Field(default_factory=list)


class ProductUpdateRequest(ApiModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    status: ProductStatus | None = None
    featured: bool | None = None
    condition: str | None = None
    year: str | None = None
    artist: str | None = None
    medium: str | None = None
    period: str | None = None
    category_id: int | None = None
    images: list[ProductImageDTO] | None = None
