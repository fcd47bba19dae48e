"""
API Tests: health, newsletter signup, admin email test and response headers.
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from exceptions.notification import EmailDeliveryException
from models.newsletter import NewsletterSubscriber


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "ok"
        assert body["environment"]["STRIPE_SECRET_KEY"] is True
        # presence only, never values
        assert "sk_test_dummy" not in response.text

    @pytest.mark.asyncio
    async def test_missing_env_is_degraded(self, client, monkeypatch):
        monkeypatch.delenv("RESEND_API_KEY")

        response = await client.get("/api/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["environment"]["RESEND_API_KEY"] is False

    @pytest.mark.asyncio
    async def test_config_default_does_not_count_as_set(self, client, monkeypatch):
        monkeypatch.delenv("SITE_URL")

        response = await client.get("/api/health")

        assert response.status_code == 503
        assert response.json()["environment"]["SITE_URL"] is False

    @pytest.mark.asyncio
    async def test_database_down_is_unhealthy(self, client):
        with patch('web.api_router.check_database', new_callable=AsyncMock, side_effect=OSError("disk gone")):
            response = await client.get("/api/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestNewsletter:

    @pytest.mark.asyncio
    async def test_subscribe_stores_and_queues_welcome(self, client, test_session):
        with patch('services.newsletter.NotificationService.welcome') as mock_welcome:
            response = await client.post("/api/newsletter/subscribe",
                                         json={"email": " Collector@Example.com ", "firstName": "Ada"})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        mock_welcome.assert_called_once_with("collector@example.com", "Ada")
        stored = (await test_session.execute(select(NewsletterSubscriber))).scalars().all()
        assert [s.email for s in stored] == ["collector@example.com"]

    @pytest.mark.asyncio
    async def test_subscribing_twice_is_harmless(self, client):
        with patch('services.newsletter.NotificationService.welcome') as mock_welcome:
            await client.post("/api/newsletter/subscribe", json={"email": "a@example.com"})
            response = await client.post("/api/newsletter/subscribe", json={"email": "a@example.com"})

        assert response.status_code == 200
        assert response.json()["alreadySubscribed"] is True
        mock_welcome.assert_called_once()

    @pytest.mark.asyncio
    async def test_skipped_without_email_provider(self, client, test_session):
        with patch('config.RESEND_API_KEY', ""):
            response = await client.post("/api/newsletter/subscribe", json={"email": "a@example.com"})

        assert response.json() == {"success": True, "skipped": True}
        assert (await test_session.execute(select(NewsletterSubscriber))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_invalid_email_is_400(self, client):
        response = await client.post("/api/newsletter/subscribe", json={"email": "not-an-email"})
        assert response.status_code == 400


class TestEmailTest:

    @pytest.mark.asyncio
    async def test_admin_only(self, client, customer_headers):
        assert (await client.post("/api/email/test", headers=customer_headers)).status_code == 403

    @pytest.mark.asyncio
    async def test_sends_to_configured_admin(self, client, admin_headers):
        with patch('services.notification.EmailApiWrapper.send',
                   new_callable=AsyncMock, return_value="msg_1") as mock_send:
            response = await client.post("/api/email/test", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "id": "msg_1"}
        assert mock_send.call_args.args[0] == "admin@example.com"

    @pytest.mark.asyncio
    async def test_provider_failure_is_502(self, client, admin_headers):
        with patch('services.notification.EmailApiWrapper.send', new_callable=AsyncMock,
                   side_effect=EmailDeliveryException("admin@example.com", "boom", 500)):
            response = await client.post("/api/email/test", headers=admin_headers, json={"to": "x@example.com"})

        assert response.status_code == 502
        assert response.json() == {"error": "Email delivery failed"}


class TestResponseHeaders:

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client):
        response = await client.get("/api/categories")
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        response = await client.get("/api/categories", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_unsafe_request_id_replaced(self, client):
        response = await client.get("/api/categories", headers={"X-Request-ID": "bad id with spaces!"})
        assert response.headers["X-Request-ID"] != "bad id with spaces!"

    @pytest.mark.asyncio
    async def test_security_headers(self, client):
        response = await client.get("/api/categories")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]
