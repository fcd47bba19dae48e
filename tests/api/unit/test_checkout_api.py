"""
API Tests: /api/checkout/*

Exercises the checkout sequence over HTTP with the payment provider mocked:
validate-cart -> create-payment-intent -> create-order.
"""

from unittest.mock import AsyncMock, patch

import pytest

from email_api.EmailApiWrapper import EmailApiWrapper
from exceptions.notification import EmailDeliveryException
from jobs.notification_dispatch_job import NotificationDispatchJob, set_dispatcher
from models.payment import PaymentIntentDTO

SHIPPING_INFO = {
    "fullName": "Ada Lovelace",
    "email": "ada@example.com",
    "address": "12 Analytical Way",
    "city": "Boston",
    "state": "MA",
    "zipCode": "02110",
}


async def open_intent(client) -> dict:
    """Run create-payment-intent and return the metadata sent to the provider."""
    created = PaymentIntentDTO(id="pi_api_1", status="requires_payment_method", amount=21600,
                               client_secret="pi_api_1_secret_x")
    with patch('services.payment.PaymentApiWrapper.create_payment_intent',
               new_callable=AsyncMock, return_value=created) as mock_create:
        response = await client.post("/api/checkout/create-payment-intent", json={
            "items": [{"productId": "P1", "quantity": 2}],
            "shippingInfo": SHIPPING_INFO,
        })
    assert response.status_code == 200
    return mock_create.call_args.kwargs


class TestValidateCart:

    @pytest.mark.asyncio
    async def test_reference_cart(self, client, make_product):
        await make_product("P1", price="100.00")

        response = await client.post("/api/checkout/validate-cart",
                                     json={"items": [{"productId": "P1", "quantity": 2}]})

        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is True
        assert body["subtotal"] == 200.0
        assert body["tax"] == 16.0
        assert body["shipping"] == 0.0
        assert body["total"] == 216.0
        assert body["items"][0]["productId"] == "P1"
        assert body["items"][0]["lineTotal"] == 200.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, 100])
    async def test_bad_quantity_is_400(self, client, make_product, quantity):
        await make_product("P1", title="Victorian Oil Portrait")

        response = await client.post("/api/checkout/validate-cart",
                                     json={"items": [{"productId": "P1", "quantity": quantity}]})

        assert response.status_code == 400
        assert response.json() == {"error": 'Invalid quantity for "Victorian Oil Portrait"'}

    @pytest.mark.asyncio
    async def test_empty_cart_is_400(self, client):
        response = await client.post("/api/checkout/validate-cart", json={"items": []})
        assert response.status_code == 400
        assert response.json() == {"error": "Cart is empty or invalid"}

    @pytest.mark.asyncio
    async def test_unknown_product_is_400(self, client):
        response = await client.post("/api/checkout/validate-cart",
                                     json={"items": [{"productId": "X9", "quantity": 1}]})
        assert response.status_code == 400
        assert response.json() == {"error": "Product X9 not found"}


class TestCreatePaymentIntent:

    @pytest.mark.asyncio
    async def test_returns_secret_and_validated_total(self, client, make_product):
        await make_product("P1", price="100.00")
        created = PaymentIntentDTO(id="pi_api_1", status="requires_payment_method", amount=21600,
                                   client_secret="pi_api_1_secret_x")

        with patch('services.payment.PaymentApiWrapper.create_payment_intent',
                   new_callable=AsyncMock, return_value=created):
            response = await client.post("/api/checkout/create-payment-intent", json={
                "items": [{"productId": "P1", "quantity": 2, "price": 0.5}],
                "shippingInfo": SHIPPING_INFO,
                "billingInfo": {"sameAsShipping": True},
            })

        assert response.status_code == 200
        assert response.json() == {
            "clientSecret": "pi_api_1_secret_x",
            "paymentIntentId": "pi_api_1",
            "validatedTotal": 216.0,
        }

    @pytest.mark.asyncio
    async def test_missing_shipping_info_is_400(self, client, make_product):
        await make_product("P1")
        response = await client.post("/api/checkout/create-payment-intent",
                                     json={"items": [{"productId": "P1", "quantity": 1}]})
        assert response.status_code == 400
        assert "shippingInfo" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_provider_not_configured_is_503(self, client, make_product):
        await make_product("P1")
        with patch('config.STRIPE_SECRET_KEY', ""):
            response = await client.post("/api/checkout/create-payment-intent", json={
                "items": [{"productId": "P1", "quantity": 1}],
                "shippingInfo": SHIPPING_INFO,
            })
        assert response.status_code == 503
        assert response.json() == {"error": "Service not configured"}


class TestCreateOrder:

    @pytest.mark.asyncio
    async def test_created_then_replayed(self, client, make_product):
        await make_product("P1", price="100.00")
        kwargs = await open_intent(client)
        paid = PaymentIntentDTO(id="pi_api_1", status="succeeded", amount=kwargs["amount"],
                                metadata=kwargs["metadata"])

        with patch('services.order.PaymentApiWrapper.retrieve_payment_intent',
                   new_callable=AsyncMock, return_value=paid):
            first = await client.post("/api/checkout/create-order", json={"paymentIntentId": "pi_api_1"})
            second = await client.post("/api/checkout/create-order", json={"paymentIntentId": "pi_api_1"})

        assert first.status_code == 201
        assert second.status_code == 200
        order = first.json()["order"]
        assert order["orderNumber"] == second.json()["order"]["orderNumber"]
        assert order["email"] == "ada@example.com"
        assert order["total"] == 216.0
        assert order["items"] == [{"title": "Victorian Oil Portrait", "quantity": 2, "price": 100.0}]
        assert order["shippingAddress"]["zipCode"] == "02110"

    @pytest.mark.asyncio
    async def test_unpaid_intent_is_400(self, client):
        pending = PaymentIntentDTO(id="pi_api_2", status="requires_payment_method", amount=100)
        with patch('services.order.PaymentApiWrapper.retrieve_payment_intent',
                   new_callable=AsyncMock, return_value=pending):
            response = await client.post("/api/checkout/create-order", json={"paymentIntentId": "pi_api_2"})

        assert response.status_code == 400
        assert response.json() == {"error": "Payment not completed"}

    @pytest.mark.asyncio
    async def test_missing_intent_id_is_400(self, client):
        response = await client.post("/api/checkout/create-order", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Payment Intent ID required"}

    @pytest.mark.asyncio
    async def test_email_outage_does_not_block_order(self, client, make_product):
        await make_product("P1", price="100.00")
        kwargs = await open_intent(client)
        paid = PaymentIntentDTO(id="pi_api_1", status="succeeded", amount=kwargs["amount"],
                                metadata=kwargs["metadata"])

        dispatcher = NotificationDispatchJob(max_attempts=2, retry_base_seconds=0)
        await dispatcher.start()
        set_dispatcher(dispatcher)
        try:
            with patch('services.order.PaymentApiWrapper.retrieve_payment_intent',
                       new_callable=AsyncMock, return_value=paid), \
                    patch.object(EmailApiWrapper, 'send', new_callable=AsyncMock,
                                 side_effect=EmailDeliveryException("ada@example.com", "outage", 503)) as mock_send:
                response = await client.post("/api/checkout/create-order", json={"paymentIntentId": "pi_api_1"})
                await dispatcher.join()
        finally:
            set_dispatcher(None)
            await dispatcher.stop()

        assert response.status_code == 201
        # customer + admin email, two attempts each
        assert mock_send.await_count == 4
        assert dispatcher.failed_count == 2
