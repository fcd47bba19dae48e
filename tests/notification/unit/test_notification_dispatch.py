"""
Unit Tests: NotificationDispatchJob and NotificationService

Queue worker retry policy (exponential backoff), give-up behaviour and the
fire-and-forget guarantee of NotificationService.
"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from email_api.EmailApiWrapper import EmailApiWrapper
from enums.email_template import EmailTemplate
from enums.order_status import OrderStatus
from exceptions.base import ConfigurationException
from exceptions.notification import EmailDeliveryException
from jobs.notification_dispatch_job import NotificationDispatchJob, set_dispatcher, get_dispatcher
from models.notification import EmailMessageDTO
from models.order import OrderDTO
from models.orderItem import OrderItemDTO
from services.notification import NotificationService


def welcome_message(to: str = "ada@example.com") -> EmailMessageDTO:
    return EmailMessageDTO(to=to, subject="Welcome", template=EmailTemplate.WELCOME, context={"first_name": "Ada"})


def sample_order() -> OrderDTO:
    return OrderDTO(
        id=1, order_number="KI-1-AAAAAAA", status=OrderStatus.SHIPPED,
        subtotal=Decimal("100.00"), tax=Decimal("8.00"), shipping=Decimal("0.00"), total=Decimal("108.00"),
        customer_name="Ada <script>", customer_email="ada@example.com",
        shipping_address="12 Analytical Way", shipping_city="Boston", shipping_zip="02110",
        shipping_country="US", carrier="UPS", tracking_number="1Z999",
        items=[OrderItemDTO(product_id="P1", title="Victorian Oil Portrait", price=Decimal("100.00"), quantity=1)],
        created_at=datetime(2026, 1, 1),
    )


@pytest.fixture
def no_sleep():
    with patch('jobs.notification_dispatch_job.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


class TestDeliver:

    @pytest.mark.asyncio
    async def test_success_first_try(self, no_sleep):
        job = NotificationDispatchJob(max_attempts=3, retry_base_seconds=1.0)
        with patch.object(EmailApiWrapper, 'send', new_callable=AsyncMock, return_value="id_1") as mock_send:
            assert await job.deliver(welcome_message()) is True

        mock_send.assert_awaited_once()
        no_sleep.assert_not_awaited()
        assert job.delivered_count == 1

    @pytest.mark.asyncio
    async def test_retries_with_exponential_backoff(self, no_sleep):
        job = NotificationDispatchJob(max_attempts=3, retry_base_seconds=1.0)
        failure = EmailDeliveryException("ada@example.com", "503", 503)
        with patch.object(EmailApiWrapper, 'send', new_callable=AsyncMock,
                          side_effect=[failure, failure, "id_1"]) as mock_send:
            assert await job.deliver(welcome_message()) is True

        assert mock_send.await_count == 3
        assert [c.args[0] for c in no_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, no_sleep):
        job = NotificationDispatchJob(max_attempts=3, retry_base_seconds=0.5)
        with patch.object(EmailApiWrapper, 'send', new_callable=AsyncMock,
                          side_effect=EmailDeliveryException("ada@example.com", "down")) as mock_send:
            assert await job.deliver(welcome_message()) is False

        assert mock_send.await_count == 3
        assert [c.args[0] for c in no_sleep.await_args_list] == [0.5, 1.0]
        assert job.failed_count == 1

    @pytest.mark.asyncio
    async def test_unconfigured_provider_not_retried(self, no_sleep):
        job = NotificationDispatchJob(max_attempts=3)
        with patch.object(EmailApiWrapper, 'send', new_callable=AsyncMock,
                          side_effect=ConfigurationException("RESEND_API_KEY")) as mock_send:
            assert await job.deliver(welcome_message()) is False

        mock_send.assert_awaited_once()


class TestWorker:

    @pytest.mark.asyncio
    async def test_processes_queue_and_survives_errors(self):
        job = NotificationDispatchJob(max_attempts=1, retry_base_seconds=0)
        await job.start()
        try:
            with patch.object(EmailApiWrapper, 'send', new_callable=AsyncMock,
                              side_effect=[RuntimeError("bug"), "id_2"]):
                job.enqueue(welcome_message("one@example.com"))
                job.enqueue(welcome_message("two@example.com"))
                await job.join()
        finally:
            await job.stop()

        assert job.delivered_count == 1
        assert job.failed_count == 1
        assert not job.is_running

    def test_full_queue_drops(self):
        job = NotificationDispatchJob(queue_size=1)
        assert job.enqueue(welcome_message()) is True
        assert job.enqueue(welcome_message()) is False


class TestNotificationService:

    def test_drops_when_dispatcher_missing(self):
        set_dispatcher(None)
        assert NotificationService.enqueue(welcome_message()) is False

    @pytest.mark.asyncio
    async def test_order_created_queues_customer_and_admin(self):
        job = NotificationDispatchJob()
        job._task = MagicMock(**{"done.return_value": False})
        set_dispatcher(job)
        try:
            NotificationService.order_created(sample_order())
        finally:
            set_dispatcher(None)

        queued = [job.queue.get_nowait() for _ in range(job.queue.qsize())]
        assert [(m.to, m.subject) for m in queued] == [
            ("ada@example.com", "Order Confirmation - KI-1-AAAAAAA"),
            ("admin@example.com", "New Order: KI-1-AAAAAAA"),
        ]
        assert get_dispatcher() is None

    def test_enqueue_never_raises(self):
        broken = NotificationDispatchJob()
        broken._task = MagicMock(**{"done.return_value": False})
        set_dispatcher(broken)
        try:
            with patch.object(broken, 'enqueue', side_effect=RuntimeError("boom")):
                assert NotificationService.enqueue(welcome_message()) is False
        finally:
            set_dispatcher(None)


class TestTemplates:

    def test_order_confirmation_renders_escaped(self):
        context = NotificationService.order_email_context(sample_order())
        html = EmailApiWrapper.render(EmailTemplate.ORDER_CONFIRMATION, context)

        assert "KI-1-AAAAAAA" in html
        assert "Victorian Oil Portrait" in html
        assert "108.00" in html
        assert "<script>" not in html

    def test_status_update_mentions_tracking(self):
        order = sample_order()
        context = {
            "order_number": order.order_number, "customer_name": "Ada", "status": "shipped",
            "carrier": "UPS", "tracking_number": "1Z999",
        }
        html = EmailApiWrapper.render(EmailTemplate.ORDER_STATUS_UPDATE, context)
        assert "1Z999" in html
        assert "UPS" in html
