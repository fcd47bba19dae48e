"""
Unit Tests: authentication

Password hashing (services/encryption.py), signed session tokens
(utils/session_token.py) and the /api/auth endpoints.
"""

import pytest

import config
from enums.user_role import UserRole
from services.encryption import EncryptionService
from utils.session_token import create_session_token, verify_session_token, SessionTokenError

SECRET = "unit_test_secret_that_is_long_enough_1234"


class TestPasswordHashing:

    def test_hash_and_verify(self):
        encoded = EncryptionService.hash_password("s3cret-pass", iterations=1000)
        assert encoded.startswith("pbkdf2_sha256$1000$")
        assert EncryptionService.verify_password("s3cret-pass", encoded)
        assert not EncryptionService.verify_password("wrong-pass", encoded)

    def test_fresh_salt_every_time(self):
        assert (EncryptionService.hash_password("same", iterations=1000)
                != EncryptionService.hash_password("same", iterations=1000))

    @pytest.mark.parametrize("encoded", [None, "", "garbage", "md5$1$00$00", "pbkdf2_sha256$x$zz$zz"])
    def test_malformed_hash_never_verifies(self, encoded):
        assert not EncryptionService.verify_password("anything", encoded)

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            EncryptionService.hash_password("")


class TestSessionToken:

    def test_round_trip(self):
        token = create_session_token(7, UserRole.ADMIN, SECRET, 3600, now=1000)
        claims = verify_session_token(token, SECRET, now=2000)
        assert claims.user_id == 7
        assert claims.role == UserRole.ADMIN
        assert claims.expires_at == 4600

    def test_expired(self):
        token = create_session_token(7, UserRole.CUSTOMER, SECRET, 60, now=1000)
        with pytest.raises(SessionTokenError):
            verify_session_token(token, SECRET, now=1061)

    def test_wrong_secret(self):
        token = create_session_token(7, UserRole.CUSTOMER, SECRET, 60, now=1000)
        with pytest.raises(SessionTokenError):
            verify_session_token(token, SECRET + "x", now=1001)

    def test_forged_role(self):
        token = create_session_token(7, UserRole.CUSTOMER, SECRET, 60, now=1000)
        _, signature = token.split(".")
        forged_payload = create_session_token(7, UserRole.ADMIN, "other", 60, now=1000).split(".")[0]
        with pytest.raises(SessionTokenError):
            verify_session_token(f"{forged_payload}.{signature}", SECRET, now=1001)

    @pytest.mark.parametrize("token", ["", "no-dot", "a.b.c", "!!!.abc"])
    def test_malformed(self, token):
        with pytest.raises(SessionTokenError):
            verify_session_token(token, SECRET)

    def test_no_secret_configured(self):
        with pytest.raises(SessionTokenError):
            create_session_token(1, UserRole.CUSTOMER, "", 60)


class TestAuthApi:

    @pytest.mark.asyncio
    async def test_login_sets_cookie_and_me_works(self, client, make_user):
        await make_user(email="ada@example.com", password="correct horse battery staple")

        response = await client.post("/api/auth/login", json={
            "email": "ADA@example.com", "password": "correct horse battery staple",
        })

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ada@example.com"
        assert config.SESSION_COOKIE_NAME in response.cookies

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {response.json()['token']}"})
        assert me.status_code == 200
        assert me.json()["role"] == "customer"
        assert "passwordHash" not in me.json()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [
        ("customer@example.com", "wrong password"),
        ("nobody@example.com", "correct horse battery staple"),
    ])
    async def test_bad_credentials_same_message(self, client, make_user, email, password):
        await make_user()
        response = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    @pytest.mark.asyncio
    async def test_me_without_session(self, client):
        assert (await client.get("/api/auth/me")).status_code == 401

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client):
        response = await client.post("/api/auth/logout")
        assert response.status_code == 200
        assert 'max-age=0' in response.headers["set-cookie"].lower()
