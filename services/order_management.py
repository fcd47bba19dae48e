"""
Admin order management: listing, detail, status/tracking updates and the
dashboard summary.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.order_status import OrderStatus
from enums.product_status import ProductStatus
from exceptions.order import OrderNotFoundException, InvalidOrderUpdateException
from models.order import OrderDTO, OrderUpdateRequest, OrderUpdateResponse, DashboardStats
from repositories.order import OrderRepository
from repositories.product import ProductRepository
from services.notification import NotificationService
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)

TRACKING_FIELDS = ("tracking_number", "shipping_label_url", "carrier")

MESSAGE_UPDATED = "Order updated successfully."
MESSAGE_UPDATED_NOTIFIED = "Order updated successfully. Customer will be notified by email."


class OrderManagementService:

    @staticmethod
    async def list_orders(session: AsyncSession, status: OrderStatus | None = None,
                          limit: int = 50, offset: int = 0) -> list[OrderDTO]:
        return await OrderRepository.get_all(session, status=status, limit=limit, offset=offset)

    @staticmethod
    async def get_order(order_id: int, session: AsyncSession) -> OrderDTO:
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    @staticmethod
    async def update_order(order_id: int, update: OrderUpdateRequest, session: AsyncSession,
                           admin_id: int | None = None) -> OrderUpdateResponse:
        """
        Apply an admin status and/or tracking update.

        Only fields present in the request are touched. Tracking values are
        trimmed and an empty string clears the field. A status change is
        checked against the state machine and queues a status email.

        Raises:
            OrderNotFoundException: Unknown order id
            InvalidOrderUpdateException: Request carries no fields
            InvalidOrderTransitionException: Status change not allowed (409)
        """
        fields_set = update.model_fields_set
        if not fields_set or (fields_set == {"status"} and update.status is None):
            raise InvalidOrderUpdateException("No fields to update", order_id)

        order = await OrderManagementService.get_order(order_id, session)

        values = {}
        status_changed = False
        if "status" in fields_set and update.status is not None:
            OrderStateMachine.validate_and_log_transition(order.id, order.status, update.status, admin_id=admin_id)
            if update.status != order.status:
                values["status"] = update.status
                status_changed = True

        for field in TRACKING_FIELDS:
            if field in fields_set:
                value = getattr(update, field)
                values[field] = (value.strip() or None) if value is not None else None

        if values:
            order = await OrderRepository.update(order_id, values, session)
            await session_commit(session)
            logger.info(f"Order {order.order_number} updated by admin {admin_id}: {sorted(values)}")
        else:
            logger.info(f"Order {order.order_number}: update by admin {admin_id} changed nothing")

        if status_changed:
            NotificationService.order_status_changed(order)
            return OrderUpdateResponse(order=order, message=MESSAGE_UPDATED_NOTIFIED)
        return OrderUpdateResponse(order=order, message=MESSAGE_UPDATED)

    @staticmethod
    async def get_dashboard_stats(session: AsyncSession, recent_limit: int = 5) -> DashboardStats:
        counts = await OrderRepository.count_by_status(session)
        return DashboardStats(
            total_orders=sum(counts.values()),
            orders_by_status={status.value: count for status, count in counts.items()},
            paid_revenue=await OrderRepository.get_paid_revenue(session),
            active_products=await ProductRepository.count_by_status(ProductStatus.ACTIVE, session),
            recent_orders=await OrderRepository.get_all(session, limit=recent_limit),
        )
