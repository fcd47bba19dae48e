"""
Thin async wrapper around the Stripe SDK.

The SDK is synchronous, so calls run in a worker thread. Everything Stripe
returns is converted to PaymentIntentDTO / plain dicts before it leaves this
module, and every SDK error becomes a PaymentProviderException whose detail
is only logged.
"""

import asyncio
import json
import logging

import stripe

import config
from exceptions.base import ConfigurationException
from exceptions.payment import PaymentProviderException, PaymentNotCompletedException, WebhookSignatureException
from models.payment import PaymentIntentDTO

logger = logging.getLogger(__name__)


def _plain(obj) -> dict:
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


def _to_dto(intent) -> PaymentIntentDTO:
    metadata = {str(k): str(v) for k, v in _plain(intent.metadata).items()}
    return PaymentIntentDTO(
        id=intent.id,
        status=intent.status,
        amount=intent.amount,
        currency=intent.currency,
        client_secret=intent.client_secret,
        metadata=metadata,
    )


class PaymentApiWrapper:
    @staticmethod
    def _api_key() -> str:
        if not config.STRIPE_SECRET_KEY:
            logger.error("STRIPE_SECRET_KEY is not configured")
            raise ConfigurationException("STRIPE_SECRET_KEY")
        return config.STRIPE_SECRET_KEY

    @staticmethod
    async def create_payment_intent(amount: int, currency: str, metadata: dict[str, str], description: str,
                                    receipt_email: str | None = None,
                                    shipping: dict | None = None) -> PaymentIntentDTO:
        """
        Open a payment intent for amount (minor units) with automatic payment methods.

        Raises:
            PaymentProviderException: If Stripe rejects the request or is unreachable
        """
        api_key = PaymentApiWrapper._api_key()
        params = {
            "amount": amount,
            "currency": currency,
            "automatic_payment_methods": {"enabled": True},
            "metadata": metadata,
            "description": description,
        }
        if receipt_email:
            params["receipt_email"] = receipt_email
        if shipping:
            params["shipping"] = shipping

        try:
            intent = await asyncio.to_thread(stripe.PaymentIntent.create, api_key=api_key, **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe create_payment_intent failed: {type(e).__name__}: {e.user_message or e}")
            raise PaymentProviderException("create_payment_intent", str(e))

        logger.info(f"Payment intent {intent.id} created: amount={amount} {currency}")
        return _to_dto(intent)

    @staticmethod
    async def retrieve_payment_intent(payment_intent_id: str) -> PaymentIntentDTO:
        """
        Fetch the provider's current view of a payment intent.

        Raises:
            PaymentNotCompletedException: If the intent does not exist
            PaymentProviderException: On any other provider error
        """
        api_key = PaymentApiWrapper._api_key()
        try:
            intent = await asyncio.to_thread(stripe.PaymentIntent.retrieve, payment_intent_id, api_key=api_key)
        except stripe.InvalidRequestError as e:
            if getattr(e, "code", None) == "resource_missing":
                logger.warning(f"Payment intent {payment_intent_id} not found at provider")
                raise PaymentNotCompletedException(payment_intent_id, "missing")
            logger.error(f"Stripe retrieve_payment_intent failed: {type(e).__name__}: {e}")
            raise PaymentProviderException("retrieve_payment_intent", str(e))
        except stripe.StripeError as e:
            logger.error(f"Stripe retrieve_payment_intent failed: {type(e).__name__}: {e}")
            raise PaymentProviderException("retrieve_payment_intent", str(e))

        return _to_dto(intent)

    @staticmethod
    def construct_webhook_event(payload: bytes, signature: str, secret: str) -> dict:
        """
        Verify a webhook signature and return the event as a plain dict.

        Raises:
            WebhookSignatureException: If the payload or signature is invalid
        """
        try:
            stripe.Webhook.construct_event(payload=payload, sig_header=signature, secret=secret)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise WebhookSignatureException("Invalid signature")
        except ValueError as e:
            logger.warning(f"Webhook payload is not valid JSON: {e}")
            raise WebhookSignatureException("Invalid payload")
        return json.loads(payload)

    @staticmethod
    def parse_unverified_event(payload: bytes) -> dict:
        try:
            event = json.loads(payload)
        except ValueError:
            raise WebhookSignatureException("Invalid payload")
        if not isinstance(event, dict):
            raise WebhookSignatureException("Invalid payload")
        return event
