import logging
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush, session_refresh
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from models.order import Order, OrderDTO
from models.orderItem import OrderItem, OrderItemDTO
from utils.money import quantize_money

logger = logging.getLogger(__name__)


class OrderRepository:
    @staticmethod
    async def create(order_dto: OrderDTO, items: list[OrderItemDTO], session: AsyncSession) -> OrderDTO:
        """
        Insert an order with its line items.

        Raises sqlalchemy.exc.IntegrityError from the flush when another
        order already holds the same payment intent id.
        """
        order = Order(**order_dto.model_dump(exclude={'id', 'items', 'created_at', 'updated_at'}))
        order.items = [
            OrderItem(
                product_id=item.product_id,
                title=item.title,
                price=item.price,
                quantity=item.quantity,
            )
            for item in items
        ]
        session.add(order)
        await session_flush(session)
        await session_refresh(session, order)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_id(order_id: int, session: AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        return None

    @staticmethod
    async def get_by_payment_intent_id(payment_intent_id: str, session: AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.payment_intent_id == payment_intent_id)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        return None

    @staticmethod
    async def update(order_id: int, values: dict, session: AsyncSession) -> OrderDTO | None:
        order = await session.get(Order, order_id)
        if order is None:
            return None
        for key, value in values.items():
            setattr(order, key, value)
        await session_flush(session)
        await session_refresh(session, order)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_all(session: AsyncSession, status: OrderStatus | None = None,
                      limit: int = 50, offset: int = 0) -> list[OrderDTO]:
        stmt = select(Order)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).offset(offset)
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(o, from_attributes=True) for o in orders.scalars().all()]

    @staticmethod
    async def count_by_status(session: AsyncSession) -> dict[OrderStatus, int]:
        stmt = select(Order.status, func.count(Order.id)).group_by(Order.status)
        rows = await session_execute(stmt, session)
        counts = {status: 0 for status in OrderStatus}
        for status, count in rows.all():
            counts[status] = count
        return counts

    @staticmethod
    async def get_paid_revenue(session: AsyncSession) -> Decimal:
        """Sum of totals of paid, non-cancelled orders."""
        stmt = (
            select(func.coalesce(func.sum(Order.total), 0))
            .where(Order.payment_status == PaymentStatus.PAID)
            .where(Order.status != OrderStatus.CANCELLED)
        )
        result = await session_execute(stmt, session)
        return quantize_money(result.scalar_one())
