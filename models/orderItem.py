from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from models.base import Base, ApiModel, Money


class OrderItem(Base):
    """Line item frozen at order time; later catalog edits don't touch it."""
    __tablename__ = 'order_items'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    product_id = Column(String(64), nullable=False)  # no FK, products may be deleted later
    title = Column(String, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship('Order', back_populates='items')

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_order_item_quantity_positive'),
    )


class OrderItemDTO(ApiModel):
    id: int | None = None
    order_id: int | None = None
    product_id: str | None = None
    title: str | None = None
    price: Money | None = None
    quantity: int | None = None
