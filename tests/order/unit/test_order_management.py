"""
Unit Tests: OrderManagementService

Tests for services/order_management.py covering admin status/tracking
updates and the dashboard summary.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from enums.product_status import ProductStatus
from exceptions.order import OrderNotFoundException, InvalidOrderTransitionException, InvalidOrderUpdateException
from models.order import OrderUpdateRequest
from repositories.order import OrderRepository
from services.order_management import OrderManagementService, MESSAGE_UPDATED, MESSAGE_UPDATED_NOTIFIED


class TestUpdateOrder:

    @pytest.mark.asyncio
    async def test_status_change_notifies_customer(self, test_session, make_order):
        order = await make_order()

        with patch('services.order_management.NotificationService.order_status_changed') as mock_notify:
            response = await OrderManagementService.update_order(
                order.id,
                OrderUpdateRequest.model_validate({"status": "shipped", "trackingNumber": " 1Z999 ", "carrier": "UPS"}),
                test_session,
                admin_id=1,
            )

        assert response.order.status == OrderStatus.SHIPPED
        assert response.order.tracking_number == "1Z999"
        assert response.order.carrier == "UPS"
        assert response.message == MESSAGE_UPDATED_NOTIFIED
        mock_notify.assert_called_once()

    @pytest.mark.asyncio
    async def test_status_is_case_insensitive(self, test_session, make_order):
        order = await make_order()

        with patch('services.order_management.NotificationService.order_status_changed'):
            response = await OrderManagementService.update_order(
                order.id, OrderUpdateRequest.model_validate({"status": "SHIPPED"}), test_session, admin_id=1)

        assert response.order.status == OrderStatus.SHIPPED

    @pytest.mark.asyncio
    async def test_illegal_transition_rejected_and_unchanged(self, test_session, make_order):
        order = await make_order(status=OrderStatus.DELIVERED)

        with patch('services.order_management.NotificationService.order_status_changed') as mock_notify:
            with pytest.raises(InvalidOrderTransitionException):
                await OrderManagementService.update_order(
                    order.id, OrderUpdateRequest(status=OrderStatus.SHIPPED), test_session, admin_id=1)

        mock_notify.assert_not_called()
        stored = await OrderRepository.get_by_id(order.id, test_session)
        assert stored.status == OrderStatus.DELIVERED

    @pytest.mark.asyncio
    async def test_skipping_a_step_rejected(self, test_session, make_order):
        order = await make_order(status=OrderStatus.PENDING)

        with pytest.raises(InvalidOrderTransitionException):
            await OrderManagementService.update_order(
                order.id, OrderUpdateRequest(status=OrderStatus.DELIVERED), test_session, admin_id=1)

    @pytest.mark.asyncio
    async def test_tracking_only_update_on_same_status(self, test_session, make_order):
        order = await make_order(status=OrderStatus.SHIPPED)

        with patch('services.order_management.NotificationService.order_status_changed') as mock_notify:
            response = await OrderManagementService.update_order(
                order.id,
                OrderUpdateRequest.model_validate({"status": "shipped", "trackingNumber": "TRACK-2"}),
                test_session,
                admin_id=1,
            )

        assert response.order.tracking_number == "TRACK-2"
        assert response.message == MESSAGE_UPDATED
        mock_notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_string_clears_tracking(self, test_session, make_order):
        order = await make_order()
        await OrderManagementService.update_order(
            order.id, OrderUpdateRequest.model_validate({"trackingNumber": "TRACK-1"}), test_session, admin_id=1)

        response = await OrderManagementService.update_order(
            order.id, OrderUpdateRequest.model_validate({"trackingNumber": ""}), test_session, admin_id=1)

        assert response.order.tracking_number is None

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, test_session, make_order):
        order = await make_order()
        with pytest.raises(InvalidOrderUpdateException):
            await OrderManagementService.update_order(order.id, OrderUpdateRequest(), test_session, admin_id=1)

    @pytest.mark.asyncio
    async def test_unknown_order(self, test_session, make_order):
        with pytest.raises(OrderNotFoundException):
            await OrderManagementService.update_order(
                999, OrderUpdateRequest(carrier="DHL"), test_session, admin_id=1)


class TestDashboard:

    @pytest.mark.asyncio
    async def test_counts_and_revenue(self, test_session, make_product, make_order):
        await make_product("P1")
        await make_product("P2", title="Sold Clock", status=ProductStatus.SOLD)
        await make_order(number="KI-1-AAAAAAA", payment_intent_id="pi_1", total="108.00")
        await make_order(number="KI-2-BBBBBBB", payment_intent_id="pi_2", total="54.00",
                           status=OrderStatus.SHIPPED)
        await make_order(number="KI-3-CCCCCCC", payment_intent_id="pi_3", total="20.00",
                           status=OrderStatus.CANCELLED)
        await make_order(number="KI-4-DDDDDDD", payment_intent_id="pi_4", total="30.00",
                           status=OrderStatus.PENDING, payment_status=PaymentStatus.PENDING)

        stats = await OrderManagementService.get_dashboard_stats(test_session)

        assert stats.total_orders == 4
        assert stats.orders_by_status["processing"] == 1
        assert stats.orders_by_status["shipped"] == 1
        assert stats.orders_by_status["delivered"] == 0
        assert stats.paid_revenue == Decimal("162.00")
        assert stats.active_products == 1
        assert len(stats.recent_orders) == 4
