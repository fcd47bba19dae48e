import json
import logging
import secrets
import string
import time
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit, session_rollback
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from exceptions.payment import (
    PaymentIntentRequiredException,
    PaymentNotCompletedException,
    PaymentAmountMismatchException,
    InvalidPaymentMetadataException,
)
from models.checkout import OrderReceipt, ReceiptItem, ShippingAddressDTO
from models.order import OrderDTO
from models.orderItem import OrderItemDTO
from models.payment import PaymentIntentDTO
from payment_api.PaymentApiWrapper import PaymentApiWrapper
from repositories.order import OrderRepository
from services.notification import NotificationService
from services.payment import PaymentService
from utils.money import quantize_money, to_minor_units
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_uppercase


class OrderService:

    @staticmethod
    def generate_order_number(now_ms: int | None = None) -> str:
        """
        Human-friendly unique order number.

        Format: <prefix>-<epoch milliseconds>-<7 random base36 chars>

        Example:
            KI-1718035200000-4F7Q2ZB
        """
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(7))
        return f"{config.ORDER_NUMBER_PREFIX}-{now_ms}-{suffix}"

    @staticmethod
    def parse_snapshot(intent: PaymentIntentDTO) -> tuple[OrderDTO, list[OrderItemDTO]]:
        """
        Rebuild the order from the snapshot stored on the payment intent.

        Raises:
            InvalidPaymentMetadataException: If the snapshot is missing or unreadable
        """
        metadata = intent.metadata
        try:
            items_raw = PaymentService.read_metadata_value(metadata, "items")
            address_raw = PaymentService.read_metadata_value(metadata, "shippingAddress")
            if not items_raw or not address_raw:
                raise ValueError("items or shippingAddress missing")

            raw_items = json.loads(items_raw)
            address = json.loads(address_raw)
            if not isinstance(raw_items, list) or not raw_items or not isinstance(address, dict):
                raise ValueError("items or shippingAddress malformed")

            items = [
                OrderItemDTO(
                    product_id=str(item["id"]),
                    title=str(item["title"]),
                    price=quantize_money(item["price"]),
                    quantity=int(item["quantity"]),
                )
                for item in raw_items
            ]

            order = OrderDTO(
                status=OrderStatus.PROCESSING,
                payment_status=PaymentStatus.PAID,
                subtotal=quantize_money(metadata["subtotal"]),
                tax=quantize_money(metadata["tax"]),
                shipping=quantize_money(metadata["shipping"]),
                total=quantize_money(metadata["total"]),
                customer_name=metadata["shippingName"],
                customer_email=metadata["shippingEmail"],
                customer_phone=metadata.get("shippingPhone") or None,
                shipping_address=address["address"],
                shipping_city=address["city"],
                shipping_state=address.get("state"),
                shipping_zip=address["zipCode"],
                shipping_country=address.get("country") or "US",
                payment_intent_id=intent.id,
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.error(f"Payment intent {intent.id} carries an unreadable order snapshot: {e}")
            raise InvalidPaymentMetadataException(intent.id, str(e))

        return order, items

    @staticmethod
    def to_receipt(order: OrderDTO) -> OrderReceipt:
        return OrderReceipt(
            order_number=order.order_number,
            email=order.customer_email,
            total=order.total,
            items=[
                ReceiptItem(title=item.title, quantity=item.quantity, price=item.price)
                for item in order.items
            ],
            shipping_address=ShippingAddressDTO(
                address=order.shipping_address,
                city=order.shipping_city,
                state=order.shipping_state,
                zip_code=order.shipping_zip,
                country=order.shipping_country,
            ),
        )

    @staticmethod
    async def create_order_from_payment(payment_intent_id: str | None, user_id: int | None,
                                        session: AsyncSession) -> tuple[OrderReceipt, bool]:
        """
        Turn a succeeded payment intent into an order, exactly once.

        Args:
            payment_intent_id: Provider payment intent id (idempotency key)
            user_id: Signed-in customer, None for guest checkout
            session: Database session

        Returns:
            (receipt, created) - created is False when an existing order is replayed

        Raises:
            PaymentIntentRequiredException: No id supplied
            PaymentNotCompletedException: Intent status is not succeeded
            PaymentAmountMismatchException: Charged amount differs from snapshot total
            InvalidPaymentMetadataException: Snapshot missing or unreadable
            PaymentProviderException: Provider unreachable
        """
        if not payment_intent_id or not payment_intent_id.strip():
            raise PaymentIntentRequiredException()
        payment_intent_id = payment_intent_id.strip()

        intent = await PaymentApiWrapper.retrieve_payment_intent(payment_intent_id)
        if intent.status != "succeeded":
            logger.warning(f"Order requested for payment intent {payment_intent_id} in status {intent.status}")
            raise PaymentNotCompletedException(payment_intent_id, intent.status)

        existing = await OrderRepository.get_by_payment_intent_id(payment_intent_id, session)
        if existing is not None:
            logger.info(f"Order {existing.order_number} already exists for payment intent {payment_intent_id}")
            return OrderService.to_receipt(existing), False

        order_dto, items = OrderService.parse_snapshot(intent)

        expected_amount = to_minor_units(order_dto.total)
        if intent.amount != expected_amount:
            logger.error(f"Payment intent {payment_intent_id} charged {intent.amount} "
                         f"but snapshot total is {expected_amount}, refusing to create order")
            raise PaymentAmountMismatchException(payment_intent_id, intent.amount, expected_amount)

        order_dto.order_number = OrderService.generate_order_number()
        order_dto.user_id = user_id

        try:
            order = await OrderRepository.create(order_dto, items, session)
            await session_commit(session)
        except IntegrityError:
            # A concurrent request won the insert for this payment intent
            await session_rollback(session)
            winner = await OrderRepository.get_by_payment_intent_id(payment_intent_id, session)
            if winner is None:
                raise
            logger.info(f"Concurrent order creation for {payment_intent_id}, returning {winner.order_number}")
            return OrderService.to_receipt(winner), False

        logger.info(f"Order {order.order_number} created for payment intent {payment_intent_id} "
                    f"({len(order.items)} line(s), total={order.total}, user={user_id or 'guest'})")

        NotificationService.order_created(order)
        return OrderService.to_receipt(order), True

    @staticmethod
    async def apply_payment_event(payment_intent_id: str, succeeded: bool, session: AsyncSession) -> OrderDTO | None:
        """
        Reflect a webhook payment outcome on the matching order.

        A succeeded intent is final, so a failure event for a paid order is a
        late delivery from an earlier declined attempt and is ignored.

        Returns:
            Updated order, or None if no order exists for the intent yet
        """
        order = await OrderRepository.get_by_payment_intent_id(payment_intent_id, session)
        if order is None:
            logger.info(f"No order for payment intent {payment_intent_id} yet, nothing to update")
            return None

        if succeeded:
            values = {"payment_status": PaymentStatus.PAID}
            if order.status == OrderStatus.PENDING:
                OrderStateMachine.validate_and_log_transition(order.id, order.status, OrderStatus.PROCESSING)
                values["status"] = OrderStatus.PROCESSING
        elif order.payment_status == PaymentStatus.PAID:
            logger.warning(f"Ignoring payment failure for paid order {order.order_number} "
                           f"(payment intent {payment_intent_id})")
            return order
        else:
            values = {"payment_status": PaymentStatus.FAILED}

        updated = await OrderRepository.update(order.id, values, session)
        await session_commit(session)
        logger.info(f"Order {order.order_number} payment status -> {updated.payment_status.value}")
        return updated
