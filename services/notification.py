import logging
from datetime import datetime, timezone

import config
from email_api.EmailApiWrapper import EmailApiWrapper
from enums.email_template import EmailTemplate
from jobs.notification_dispatch_job import get_dispatcher
from models.notification import EmailMessageDTO
from models.order import OrderDTO

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Builds transactional emails and hands them to the dispatch queue.

    Every method except send_test_email is fire-and-forget: it never raises
    and never waits for delivery.
    """

    @staticmethod
    def enqueue(message: EmailMessageDTO) -> bool:
        try:
            dispatcher = get_dispatcher()
            if dispatcher is None or not dispatcher.is_running:
                logger.warning(f"[Notification] Dispatcher not running, dropping email '{message.subject}'")
                return False
            return dispatcher.enqueue(message)
        except Exception as e:
            logger.error(f"[Notification] Failed to queue email '{message.subject}': {e}", exc_info=True)
            return False

    @staticmethod
    def order_email_context(order: OrderDTO) -> dict:
        return {
            "order_number": order.order_number,
            "customer_name": order.customer_name,
            "customer_email": order.customer_email,
            "subtotal": float(order.subtotal or 0),
            "tax": float(order.tax or 0),
            "shipping": float(order.shipping or 0),
            "total": float(order.total or 0),
            "items": [
                {"title": item.title, "price": float(item.price), "quantity": item.quantity}
                for item in order.items
            ],
            "shipping_address": {
                "address": order.shipping_address,
                "city": order.shipping_city,
                "state": order.shipping_state,
                "zip_code": order.shipping_zip,
                "country": order.shipping_country,
            },
        }

    @staticmethod
    def order_created(order: OrderDTO):
        """Customer confirmation + admin alert."""
        context = NotificationService.order_email_context(order)
        NotificationService.enqueue(EmailMessageDTO(
            to=order.customer_email,
            subject=f"Order Confirmation - {order.order_number}",
            template=EmailTemplate.ORDER_CONFIRMATION,
            context=context,
        ))
        if config.ADMIN_EMAIL:
            NotificationService.enqueue(EmailMessageDTO(
                to=config.ADMIN_EMAIL,
                subject=f"New Order: {order.order_number}",
                template=EmailTemplate.ADMIN_NEW_ORDER,
                context=context,
            ))

    @staticmethod
    def order_status_changed(order: OrderDTO):
        NotificationService.enqueue(EmailMessageDTO(
            to=order.customer_email,
            subject=f"Order {order.order_number} - Status Update",
            template=EmailTemplate.ORDER_STATUS_UPDATE,
            context={
                "order_number": order.order_number,
                "customer_name": order.customer_name,
                "status": order.status.value,
                "carrier": order.carrier,
                "tracking_number": order.tracking_number,
            },
        ))

    @staticmethod
    def welcome(email: str, first_name: str | None):
        NotificationService.enqueue(EmailMessageDTO(
            to=email,
            subject="Welcome to Kollect-It!",
            template=EmailTemplate.WELCOME,
            context={"first_name": first_name},
        ))

    @staticmethod
    async def send_test_email(to: str) -> str | None:
        """
        Send a connection test email and wait for the provider's answer.

        Raises:
            ConfigurationException: If email delivery is not configured
            EmailDeliveryException: If the provider rejects the message
        """
        sent_at = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')
        html = EmailApiWrapper.render(EmailTemplate.CONNECTION_TEST, {"sent_at": sent_at})
        return await EmailApiWrapper.send(to, "Kollect-It Email Test", html)
