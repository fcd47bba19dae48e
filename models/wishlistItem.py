from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship

from models.base import Base, ApiModel
from models.product import ProductDTO


class WishlistItem(Base):
    __tablename__ = 'wishlist_items'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    product_id = Column(String(64), ForeignKey('products.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, default=func.now())

    product = relationship('Product', lazy='joined')

    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_wishlist_user_product'),
    )


class WishlistItemDTO(ApiModel):
    id: int | None = None
    user_id: int | None = None
    product_id: str | None = None
    created_at: datetime | None = None
    product: ProductDTO | None = None


class WishlistRequest(ApiModel):
    product_id: str
