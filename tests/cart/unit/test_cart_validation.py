"""
Unit Tests: CartService

Tests for services/cart.py covering:
- calculate_totals() - tax/shipping/total rounding
- validate_cart() - catalog re-pricing, quantity bounds, unknown/inactive products
- CartLineItem coercion of untrusted client input
"""

from decimal import Decimal

import pytest

from enums.product_status import ProductStatus
from exceptions.cart import (
    EmptyCartException,
    CartProductNotFoundException,
    ProductUnavailableException,
    InvalidQuantityException,
)
from models.cart import CartLineItem
from services.cart import CartService


def line(product_id, quantity, **extra):
    return CartLineItem.model_validate({"productId": product_id, "quantity": quantity, **extra})


class TestCalculateTotals:

    def test_eight_percent_tax_free_shipping(self):
        tax, shipping, total = CartService.calculate_totals(Decimal("200.00"))
        assert tax == Decimal("16.00")
        assert shipping == Decimal("0.00")
        assert total == Decimal("216.00")

    def test_tax_rounds_half_up(self):
        # 0.08 * 10.31 = 0.8248 -> 0.82
        tax, _, total = CartService.calculate_totals(Decimal("10.31"))
        assert tax == Decimal("0.82")
        assert total == Decimal("11.13")

        # 0.08 * 0.5625 = 0.045 -> 0.05 (half-up, not banker's rounding)
        tax, _, _ = CartService.calculate_totals(Decimal("0.5625"))
        assert tax == Decimal("0.05")


class TestValidateCart:

    @pytest.mark.asyncio
    async def test_reprices_from_catalog(self, test_session, make_product):
        """Example cart: P1 at 100.00 x2"""
        await make_product("P1", price="100.00")

        cart = await CartService.validate_cart([line("P1", 2)], test_session)

        assert cart.valid is True
        assert len(cart.items) == 1
        assert cart.items[0].price == Decimal("100.00")
        assert cart.items[0].line_total == Decimal("200.00")
        assert cart.subtotal == Decimal("200.00")
        assert cart.tax == Decimal("16.00")
        assert cart.shipping == Decimal("0.00")
        assert cart.total == Decimal("216.00")

    @pytest.mark.asyncio
    async def test_client_price_is_ignored(self, test_session, make_product):
        await make_product("P1", price="100.00")

        cart = await CartService.validate_cart([line("P1", 1, price=0.01)], test_session)

        assert cart.subtotal == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_totals_are_consistent(self, test_session, make_product):
        await make_product("P1", price="19.99")
        await make_product("P2", title="Brass Candlestick", price="45.50")

        cart = await CartService.validate_cart([line("P1", 3), line("P2", 1)], test_session)

        assert cart.subtotal == sum(item.price * item.quantity for item in cart.items)
        assert cart.total == cart.subtotal + cart.tax + cart.shipping
        assert cart.total == Decimal("113.91")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [1, 99])
    async def test_quantity_bounds_accepted(self, test_session, make_product, quantity):
        await make_product("P1")
        cart = await CartService.validate_cart([line("P1", quantity)], test_session)
        assert cart.items[0].quantity == quantity

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, 100, -1, None, 1.5, "2"])
    async def test_quantity_out_of_range_rejected(self, test_session, make_product, quantity):
        await make_product("P1", title="Victorian Oil Portrait")

        with pytest.raises(InvalidQuantityException) as exc_info:
            await CartService.validate_cart([line("P1", quantity)], test_session)

        assert "Victorian Oil Portrait" in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("items", [None, []])
    async def test_empty_cart_rejected(self, test_session, items):
        with pytest.raises(EmptyCartException):
            await CartService.validate_cart(items, test_session)

    @pytest.mark.asyncio
    async def test_unknown_product_rejected(self, test_session):
        with pytest.raises(CartProductNotFoundException) as exc_info:
            await CartService.validate_cart([line("NOPE", 1)], test_session)
        assert exc_info.value.message == "Product NOPE not found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [ProductStatus.SOLD, ProductStatus.DRAFT])
    async def test_inactive_product_rejected(self, test_session, make_product, status):
        await make_product("P1", title="Art Deco Vase", status=status)

        with pytest.raises(ProductUnavailableException) as exc_info:
            await CartService.validate_cart([line("P1", 1)], test_session)

        assert exc_info.value.message == 'Product "Art Deco Vase" is no longer available'

    @pytest.mark.asyncio
    async def test_first_invalid_line_wins(self, test_session, make_product):
        await make_product("P1")
        await make_product("P2", title="Sold Clock", status=ProductStatus.SOLD)

        with pytest.raises(CartProductNotFoundException):
            await CartService.validate_cart([line("P1", 1), line("MISSING", 1), line("P2", 1)], test_session)


class TestCartLineItem:

    def test_accepts_camel_and_snake_case(self):
        assert CartLineItem.model_validate({"productId": "A", "quantity": 1}).product_id == "A"
        assert CartLineItem.model_validate({"product_id": "A", "quantity": 1}).product_id == "A"

    def test_numeric_product_id_coerced_to_string(self):
        assert CartLineItem.model_validate({"productId": 42, "quantity": 1}).product_id == "42"

    @pytest.mark.parametrize("raw", [True, 2.5, "3", None])
    def test_non_integer_quantity_becomes_none(self, raw):
        assert CartLineItem.model_validate({"productId": "A", "quantity": raw}).quantity is None

    def test_integral_float_quantity_kept(self):
        assert CartLineItem.model_validate({"productId": "A", "quantity": 2.0}).quantity == 2
