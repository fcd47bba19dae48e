"""
Checkout API: cart validation, payment intent creation and order creation.

All prices come from the catalog; client totals are ignored.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from middleware.request_context import get_request_id
from models.cart import CartValidationRequest, ValidatedCart
from models.checkout import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    CreateOrderRequest,
    CreateOrderResponse,
)
from services.cart import CartService
from services.order import OrderService
from services.payment import PaymentService
from web.dependencies import get_optional_user_id

logger = logging.getLogger(__name__)

checkout_router = APIRouter(prefix="/api/checkout", tags=["checkout"])


@checkout_router.post("/validate-cart", response_model=ValidatedCart)
async def validate_cart(payload: CartValidationRequest, session: AsyncSession = Depends(get_session)):
    return await CartService.validate_cart(payload.items, session)


@checkout_router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(request: Request, payload: PaymentIntentRequest,
                                session: AsyncSession = Depends(get_session)):
    """
    Re-validate the cart and open a payment intent for the server total.

    Returns:
        200: {clientSecret, paymentIntentId, validatedTotal}
        400: Cart invalid
        502: Payment provider unavailable
        503: Payment provider not configured
    """
    correlation_id = get_request_id(request)
    response = await PaymentService.create_payment_intent(payload, session)
    logger.info(f"[{correlation_id}] Payment intent {response.payment_intent_id} ready, "
                f"total={response.validated_total}")
    return response


@checkout_router.post("/create-order", status_code=status.HTTP_201_CREATED, response_model=CreateOrderResponse)
async def create_order(request: Request, payload: CreateOrderRequest,
                       session: AsyncSession = Depends(get_session),
                       user_id: int | None = Depends(get_optional_user_id)):
    """
    Create the order for a succeeded payment intent.

    Safe to repeat: a second call for the same intent replays the existing
    order with 200 instead of 201.
    """
    correlation_id = get_request_id(request)
    receipt, created = await OrderService.create_order_from_payment(payload.payment_intent_id, user_id, session)
    response = CreateOrderResponse(order=receipt)
    if created:
        logger.info(f"[{correlation_id}] Order {receipt.order_number} created")
        return response
    logger.info(f"[{correlation_id}] Order {receipt.order_number} replayed")
    return JSONResponse(status_code=status.HTTP_200_OK,
                        content=response.model_dump(mode="json", by_alias=True))
