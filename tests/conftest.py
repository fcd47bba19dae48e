"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
from decimal import Decimal

# Test configuration must be in place before config.py is imported
os.environ["RUNTIME_ENVIRONMENT"] = "TEST"
os.environ["DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SESSION_SECRET"] = "test_session_secret_min_32_chars_long_1234"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_dummy"
os.environ["RESEND_API_KEY"] = "re_test_dummy"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ["TRUST_PROXY_HEADERS"] = "false"
os.environ["SITE_URL"] = "http://localhost:3000"
os.environ["LOG_DIR"] = os.path.join(os.path.dirname(__file__), ".logs")

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import config
from db import build_engine, get_session
from enums.product_status import ProductStatus
from enums.user_role import UserRole
from middleware.rate_limit import FixedWindowRateLimiter
from models.base import Base
from models.category import Category
from models.product import Product, ProductImage
from models.user import User
from services.encryption import EncryptionService
from utils.session_token import create_session_token

TEST_PASSWORD = "correct horse battery staple"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """File-backed SQLite per test so every session gets its own connection."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def test_session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_session(test_session_maker):
    """Create test database session."""
    async with test_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


# ============================================================================
# Catalog / User Factories
# ============================================================================

@pytest_asyncio.fixture
async def category(test_session):
    entity = Category(name="Fine Art", slug="fine-art")
    test_session.add(entity)
    await test_session.commit()
    return entity


@pytest.fixture
def make_product(test_session):
    """Insert a product row and commit it."""

    async def _make(product_id: str = "P1", title: str = "Victorian Oil Portrait",
                    price: str = "100.00", status: ProductStatus = ProductStatus.ACTIVE,
                    category_id: int | None = None, featured: bool = False, artist: str | None = None):
        product = Product(
            id=product_id,
            title=title,
            slug=f"{product_id.lower()}-{title.lower().replace(' ', '-')}",
            price=Decimal(price),
            status=status,
            featured=featured,
            artist=artist,
            category_id=category_id,
        )
        product.images = [ProductImage(url=f"https://cdn.example.com/{product_id}.jpg", alt=title, position=0)]
        test_session.add(product)
        await test_session.commit()
        return product

    return _make


@pytest.fixture
def make_user(test_session):
    async def _make(email: str = "customer@example.com", role: UserRole = UserRole.CUSTOMER,
                    password: str = TEST_PASSWORD):
        user = User(
            email=email,
            name=email.split("@")[0],
            password_hash=EncryptionService.hash_password(password, iterations=1000),
            role=role,
        )
        test_session.add(user)
        await test_session.commit()
        return user

    return _make


def auth_headers(user_id: int, role: UserRole) -> dict[str, str]:
    token = create_session_token(user_id, role, config.SESSION_SECRET, config.SESSION_MAX_AGE_SECONDS)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_headers(make_user):
    admin = await make_user(email="owner@example.com", role=UserRole.ADMIN)
    return auth_headers(admin.id, UserRole.ADMIN)


@pytest_asyncio.fixture
async def customer_headers(make_user):
    customer = await make_user()
    return auth_headers(customer.id, UserRole.CUSTOMER)


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def app(test_session_maker):
    """Application wired to the per-test database (lifespan not run)."""
    from app import create_app

    application = create_app()

    async def override_get_session():
        async with test_session_maker() as session:
            yield session

    application.dependency_overrides[get_session] = override_get_session
    application.state.listing_rate_limiter = FixedWindowRateLimiter(
        max_requests=config.LISTING_RATE_LIMIT_MAX_REQUESTS,
        window_seconds=config.LISTING_RATE_LIMIT_WINDOW_SECONDS,
    )
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest.fixture
def make_order(test_session):
    """Insert a paid single-line order through the repository and commit it."""
    from enums.order_status import OrderStatus
    from enums.payment_status import PaymentStatus
    from models.order import OrderDTO
    from models.orderItem import OrderItemDTO
    from repositories.order import OrderRepository

    async def _make(status: OrderStatus = OrderStatus.PROCESSING, payment_status: PaymentStatus = PaymentStatus.PAID,
                    number: str = "KI-1-AAAAAAA", payment_intent_id: str = "pi_1", total: str = "108.00"):
        order = await OrderRepository.create(OrderDTO(
            order_number=number,
            status=status,
            payment_status=payment_status,
            subtotal=Decimal("100.00"),
            tax=Decimal("8.00"),
            shipping=Decimal("0.00"),
            total=Decimal(total),
            customer_name="Ada Lovelace",
            customer_email="ada@example.com",
            shipping_address="12 Analytical Way",
            shipping_city="Boston",
            shipping_zip="02110",
            shipping_country="US",
            payment_intent_id=payment_intent_id,
        ), [OrderItemDTO(product_id="P1", title="Victorian Oil Portrait", price=Decimal("100.00"), quantity=1)],
            test_session)
        await test_session.commit()
        return order

    return _make


@pytest.fixture
def headers_for():
    """Bearer headers for an arbitrary user id and role."""
    return auth_headers
