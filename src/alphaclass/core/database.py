"""
Database engine and session management.

Async SQLAlchemy engine shared by the application; sessions are handed to
request handlers through the ``get_db`` dependency.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from alphaclass.config import settings
from alphaclass.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def _engine_options() -> dict[str, Any]:
    if settings.is_sqlite:
        return {"pool_pre_ping": True}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
    }


engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG, **_engine_options())

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session per request.

    Commits when the handler returns normally and rolls back otherwise.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def store_guard(operation: str) -> AsyncIterator[None]:
    """Convert driver/ORM failures inside the block into ``StoreUnavailable``."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Store operation '{operation}' failed: {e}")
        raise StoreUnavailable(f"{operation} failed") from e


async def close_db() -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()
