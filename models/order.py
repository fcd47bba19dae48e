from datetime import datetime

from pydantic import Field, field_validator
from sqlalchemy import Column, Integer, DateTime, ForeignKey, String, Numeric, func, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from models.base import Base, ApiModel, Money
from models.orderItem import OrderItemDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, unique=True)
    order_number = Column(String(64), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=True)  # None for guest checkout
    status = Column(SQLEnum(OrderStatus, values_callable=lambda e: [m.value for m in e]),
                    nullable=False, default=OrderStatus.PENDING)
    payment_status = Column(SQLEnum(PaymentStatus, values_callable=lambda e: [m.value for m in e]),
                            nullable=False, default=PaymentStatus.PENDING)

    # Amounts in major currency units
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False)
    shipping = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)

    # Customer / shipping snapshot
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String, nullable=True)
    shipping_address = Column(String, nullable=False)
    shipping_city = Column(String, nullable=False)
    shipping_state = Column(String, nullable=True)
    shipping_zip = Column(String, nullable=False)
    shipping_country = Column(String, nullable=False, default='US')

    # One order per payment intent, enforced here rather than by a read-then-write check
    payment_intent_id = Column(String(255), nullable=False, unique=True)

    # Tracking (advisory)
    carrier = Column(String, nullable=True)
    tracking_number = Column(String, nullable=True)
    shipping_label_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relations
    user = relationship('User', backref='orders')
    items = relationship('OrderItem', back_populates='order', lazy='selectin', cascade='all, delete-orphan')

    __table_args__ = (
        CheckConstraint('total >= 0', name='check_order_total_non_negative'),
    )


class OrderDTO(ApiModel):
    id: int | None = None
    order_number: str | None = None
    user_id: int | None = None
    status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None
    subtotal: Money | None = None
    tax: Money | None = None
    shipping: Money | None = None
    total: Money | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    shipping_address: str | None = None
    shipping_city: str | None = None
    shipping_state: str | None = None
    shipping_zip: str | None = None
    shipping_country: str | None = None
    payment_intent_id: str | None = None
    carrier: str | None = None
    tracking_number: str | None = None
    shipping_label_url: str | None = None
    items: list[OrderItemDTO] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderUpdateRequest(ApiModel):
    """
    Admin order update. Omitted fields are left untouched; an empty string
    clears a tracking field.
    """
    status: OrderStatus | None = None
    tracking_number: str | None = Field(default=None, max_length=255)
    shipping_label_url: str | None = Field(default=None, max_length=2048)
    carrier: str | None = Field(default=None, max_length=100)

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class OrderUpdateResponse(ApiModel):
    order: OrderDTO
    message: str


class DashboardStats(ApiModel):
    total_orders: int
    orders_by_status: dict[str, int]
    paid_revenue: Money
    active_products: int
    recent_orders: list[OrderDTO]
