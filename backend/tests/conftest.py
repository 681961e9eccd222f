# backend/tests/conftest.py
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from account_security.db.base import Base
from account_security.db.models.user import User
from account_security.db.session import create_session_factory
from tests.factories import UserFactory
from tests.utils.clock import FrozenClock

# One private in-memory database per test; StaticPool keeps the single
# connection alive for the lifetime of the engine.
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FROZEN_START = datetime(2026, 1, 5, 10, 0, 0, tzinfo=UTC)


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Creates/Disposes an async engine FOR EACH TEST FUNCTION."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Yields a database session per function, using the function-scoped engine."""
    session_factory = create_session_factory(test_engine)
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(FROZEN_START)


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Persist a user built by UserFactory and return it."""

    async def _make_user(**kwargs: Any) -> User:
        user = UserFactory.create_user(db_session, **kwargs)
        await db_session.commit()
        return user

    return _make_user
