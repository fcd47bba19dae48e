import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from enums.order_status import OrderStatus
from middleware.request_context import get_request_id
from models.order import OrderDTO, OrderUpdateRequest, OrderUpdateResponse, DashboardStats
from models.user import UserDTO
from services.order_management import OrderManagementService
from web.dependencies import require_admin

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


@admin_router.get("/orders", response_model=list[OrderDTO])
async def list_orders(status: OrderStatus | None = Query(default=None),
                      limit: int = Query(default=50, ge=1, le=200),
                      offset: int = Query(default=0, ge=0),
                      session: AsyncSession = Depends(get_session),
                      admin: UserDTO = Depends(require_admin)):
    return await OrderManagementService.list_orders(session, status=status, limit=limit, offset=offset)


@admin_router.get("/orders/{order_id}", response_model=OrderDTO)
async def get_order(order_id: int,
                    session: AsyncSession = Depends(get_session),
                    admin: UserDTO = Depends(require_admin)):
    return await OrderManagementService.get_order(order_id, session)


@admin_router.patch("/orders/{order_id}", response_model=OrderUpdateResponse)
async def update_order(order_id: int, payload: OrderUpdateRequest, request: Request,
                       session: AsyncSession = Depends(get_session),
                       admin: UserDTO = Depends(require_admin)):
    """
    Update an order's status and/or tracking fields.

    Returns:
        200: {order, message}
        400: Empty update or unknown status value
        404: Order not found
        409: Status transition not allowed
    """
    correlation_id = get_request_id(request)
    logger.info(f"[{correlation_id}] Admin {admin.id} updating order {order_id}")
    return await OrderManagementService.update_order(order_id, payload, session, admin_id=admin.id)


@admin_router.get("/dashboard", response_model=DashboardStats)
async def dashboard(session: AsyncSession = Depends(get_session),
                    admin: UserDTO = Depends(require_admin)):
    return await OrderManagementService.get_dashboard_stats(session)
