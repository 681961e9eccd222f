# backend/account_security/db/session.py
"""
Engine and session factories for the record store.

Nothing here is a process-wide singleton: callers build a factory once,
own its lifetime, and hand sessions to the services explicitly.
"""

import contextlib
import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from account_security.core.config import settings

logger = logging.getLogger(__name__)


def create_engine(database_url: str | None = None, *, echo: bool | None = None) -> AsyncEngine:
    """Create an async engine for the configured (or given) database URL."""
    db_url = database_url or settings.DATABASE_URL
    engine = create_async_engine(
        db_url,
        pool_pre_ping=True,
        echo=settings.DB_ECHO if echo is None else echo,
    )
    logger.info(f"Async database engine configured ({db_url.split('@')[-1]}).")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )


@contextlib.asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session; roll back and re-raise if the block fails.

    Commits are explicit in the services, so a clean exit does not commit.
    """
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async DB session rolled back due to an exception.", exc_info=True)
            raise
