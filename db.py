from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

from sqlalchemy import text, Result, CursorResult
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import config
from models.base import Base

"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models.category import Category
from models.product import Product, ProductImage
from models.user import User
from models.order import Order
from models.orderItem import OrderItem
from models.wishlistItem import WishlistItem
from models.newsletter import NewsletterSubscriber

# HARD DISABLE SQL echo - SQL statements clutter the application log
sql_echo = False


def build_engine(url: str):
    """
    Create the async engine for a database URL.

    In-memory SQLite must share one connection, otherwise every
    connection sees its own empty database.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        database = parsed.database or ""
        if database in ("", ":memory:"):
            return create_async_engine(
                url,
                echo=sql_echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    return create_async_engine(url, echo=sql_echo)


engine = build_engine(config.DB_URL)
session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with get_db_session() as session:
        yield session


async def session_execute(stmt, session: AsyncSession) -> Result[Any] | CursorResult[Any]:
    return await session.execute(stmt)


async def session_flush(session: AsyncSession) -> None:
    await session.flush()


async def session_commit(session: AsyncSession) -> None:
    await session.commit()


async def session_rollback(session: AsyncSession) -> None:
    await session.rollback()


async def session_refresh(session: AsyncSession, instance) -> None:
    await session.refresh(instance)


async def check_database(session: AsyncSession) -> bool:
    await session.execute(text("SELECT 1"))
    return True


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
