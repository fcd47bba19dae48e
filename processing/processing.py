import logging

from fastapi import APIRouter, Request, Depends
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_session
from enums.runtime_environment import RuntimeEnvironment
from exceptions.base import ConfigurationException
from exceptions.payment import WebhookSignatureException
from middleware.request_context import get_request_id
from payment_api.PaymentApiWrapper import PaymentApiWrapper
from services.order import OrderService

logger = logging.getLogger(__name__)

processing_router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

SIGNATURE_HEADER = "Stripe-Signature"

PAYMENT_EVENTS = {
    "payment_intent.succeeded": True,
    "payment_intent.payment_failed": False,
}


def __read_event(payload: bytes, signature: str | None, correlation_id: str) -> dict:
    """
    Verify and decode a provider event.

    Security: a missing signature header is always rejected. Without a
    configured signing secret the endpoint fails closed, except in DEV where
    the body is parsed unverified.
    """
    if not signature:
        logger.warning(f"[{correlation_id}] Payment webhook rejected: missing {SIGNATURE_HEADER} header")
        raise WebhookSignatureException("Missing signature")

    secret = config.STRIPE_WEBHOOK_SECRET
    if not secret:
        if config.RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
            logger.warning(f"[{correlation_id}] STRIPE_WEBHOOK_SECRET not set, accepting UNVERIFIED event (DEV only)")
            return PaymentApiWrapper.parse_unverified_event(payload)
        logger.error(f"[{correlation_id}] Payment webhook rejected: STRIPE_WEBHOOK_SECRET not configured")
        raise ConfigurationException("STRIPE_WEBHOOK_SECRET")

    return PaymentApiWrapper.construct_webhook_event(payload, signature, secret)


@processing_router.post("/stripe")
async def stripe_event(request: Request, session: AsyncSession = Depends(get_session)):
    """
    Webhook endpoint for payment provider notifications.

    payment_intent.succeeded marks the matching order paid (and moves it to
    processing if still pending), payment_intent.payment_failed marks it
    failed. Other event types are acknowledged and ignored.
    """
    correlation_id = get_request_id(request)
    payload = await request.body()
    event = __read_event(payload, request.headers.get(SIGNATURE_HEADER), correlation_id)

    event_type = event.get("type")
    logger.info(f"[{correlation_id}] Payment webhook event {event.get('id')} ({event_type})")

    if event_type in PAYMENT_EVENTS:
        intent = (event.get("data") or {}).get("object") or {}
        payment_intent_id = intent.get("id")
        if payment_intent_id:
            await OrderService.apply_payment_event(payment_intent_id, PAYMENT_EVENTS[event_type], session)
        else:
            logger.warning(f"[{correlation_id}] {event_type} event without payment intent id")
    else:
        logger.info(f"[{correlation_id}] Unhandled event type {event_type}, acknowledged")

    return {"received": True}
