"""Analytics store engine management.

The engine is created lazily from DatabaseSettings on first use and shared by
every executor in the process. Pagination needs two pooled connections per
list request (page + count), so size the pool accordingly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from analytics_service.core.database.executor import SQLAlchemyExecutor
from analytics_service.core.settings import DatabaseSettings, get_db_settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None


def create_engine_from_settings(db_settings: DatabaseSettings) -> AsyncEngine:
    """Create an AsyncEngine configured from settings.

    Pool sizing arguments are skipped for SQLite, whose async driver does not
    use a QueuePool.
    """
    engine_kwargs: dict[str, Any] = {"echo": db_settings.echo}
    if not db_settings.is_sqlite:
        engine_kwargs.update(
            pool_size=db_settings.pool_size,
            max_overflow=db_settings.max_overflow,
            pool_timeout=db_settings.pool_timeout,
            pool_recycle=db_settings.pool_recycle,
            pool_pre_ping=db_settings.pre_ping,
        )
    return create_async_engine(db_settings.url, **engine_kwargs)


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_engine_from_settings(get_db_settings())
    return _engine


def get_executor(engine: AsyncEngine | None = None) -> SQLAlchemyExecutor:
    """Build a SQLAlchemyExecutor with the configured deadlines."""
    db_settings = get_db_settings()
    return SQLAlchemyExecutor(
        engine or get_engine(),
        query_timeout=db_settings.query_timeout,
        slow_query_threshold=db_settings.slow_query_threshold,
    )


async def init_database() -> None:
    """Verify the analytics store is reachable.

    Raises:
        Exception: Whatever the driver raises when the store cannot be reached.
    """
    engine = get_engine()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(
            "Failed to connect to analytics store",
            extra={"url": engine.url.render_as_string(hide_password=True), "error": str(e)},
        )
        raise
    logger.info(
        "Analytics store connection established",
        extra={"url": engine.url.render_as_string(hide_password=True)},
    )


async def close_database() -> None:
    """Dispose the engine and its pool. Called during application shutdown."""
    global _engine
    if _engine is None:
        return

    logger.info("Closing analytics store connections")
    try:
        await _engine.dispose()
    except Exception as e:
        logger.exception("Error closing analytics store connections", extra={"error": str(e)})
    finally:
        _engine = None


__all__ = [
    "close_database",
    "create_engine_from_settings",
    "get_engine",
    "get_executor",
    "init_database",
]
