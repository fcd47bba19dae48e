import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

import config
from enums.product_status import ProductStatus
from exceptions.cart import (
    EmptyCartException,
    CartProductNotFoundException,
    ProductUnavailableException,
    InvalidQuantityException,
)
from models.cart import CartLineItem, ValidatedCart, ValidatedLineItem
from repositories.product import ProductRepository
from utils.money import quantize_money

logger = logging.getLogger(__name__)


class CartService:

    @staticmethod
    def calculate_totals(subtotal: Decimal) -> tuple[Decimal, Decimal, Decimal]:
        """
        Tax, shipping and grand total for a subtotal.

        Returns:
            (tax, shipping, total), each rounded half-up to cents

        Example:
            >>> CartService.calculate_totals(Decimal("200.00"))
            (Decimal('16.00'), Decimal('0.00'), Decimal('216.00'))
        """
        tax = quantize_money(subtotal * config.TAX_RATE)
        shipping = quantize_money(config.FLAT_SHIPPING)
        total = quantize_money(subtotal + tax + shipping)
        return tax, shipping, total

    @staticmethod
    async def validate_cart(items: list[CartLineItem] | None, session: AsyncSession) -> ValidatedCart:
        """
        Re-price a client cart from the catalog.

        Client prices are never read. The first bad line fails the whole
        cart, in submission order, so the client gets one specific reason.

        Args:
            items: Untrusted line items as submitted
            session: Database session (read-only use)

        Returns:
            ValidatedCart with server-side line totals and grand totals

        Raises:
            EmptyCartException: No items
            CartProductNotFoundException: Unknown product id
            ProductUnavailableException: Product exists but is not active
            InvalidQuantityException: Quantity missing or outside [1, MAX_LINE_QUANTITY]
        """
        if not items:
            raise EmptyCartException()

        products = await ProductRepository.get_by_ids([item.product_id for item in items], session)

        validated_items = []
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                raise CartProductNotFoundException(item.product_id)

            if product.status != ProductStatus.ACTIVE:
                raise ProductUnavailableException(product.id, product.title, product.status.value)

            quantity = item.quantity
            if quantity is None or not (config.MIN_LINE_QUANTITY <= quantity <= config.MAX_LINE_QUANTITY):
                raise InvalidQuantityException(product.id, product.title, quantity)

            price = quantize_money(product.price)
            validated_items.append(ValidatedLineItem(
                product_id=product.id,
                title=product.title,
                price=price,
                quantity=quantity,
                line_total=quantize_money(price * quantity),
            ))

        subtotal = quantize_money(sum((line.line_total for line in validated_items), Decimal("0")))
        tax, shipping, total = CartService.calculate_totals(subtotal)

        logger.info(f"Cart validated: {len(validated_items)} line(s), total={total}")
        return ValidatedCart(
            items=validated_items,
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=total,
        )
