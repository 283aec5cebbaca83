"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: settings caches reset around every test
    - Database Fixtures: file-backed SQLite store, executor, seeded events
    - Application Fixtures: FastAPI app wired to the test store, HTTP client

SQLite is file-backed rather than ``:memory:`` because every executor query
checks out its own connection, and each in-memory connection would see a
separate empty database.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Iterator
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import create_async_engine

from tests.utils import OTHER_EVENTS, STREAM_EVENTS

if TYPE_CHECKING:
    from pathlib import Path

    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

    from analytics_service.core.database import SQLAlchemyExecutor

# Tests never reach a real analytics store
os.environ.setdefault("APP_CHECK_DATABASE_ON_STARTUP", "false")
os.environ.setdefault("LOG_JSON_LOGS", "false")


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_settings_caches() -> Iterator[None]:
    """Reload settings for every test so monkeypatched env vars apply."""
    from analytics_service.core.settings import clear_all_caches

    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Async engine on a fresh SQLite file with all tables created.

    Yields:
        Engine connected to an empty analytics store.
    """
    from analytics_service.core.database import Base

    # Register models on Base.metadata
    import analytics_service.features.stream_events.models  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'analytics.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def executor(db_engine: AsyncEngine) -> SQLAlchemyExecutor:
    """Executor over the test store."""
    from analytics_service.core.database import SQLAlchemyExecutor

    return SQLAlchemyExecutor(db_engine, query_timeout=5.0)


@pytest.fixture
def insert_events(db_engine: AsyncEngine):
    """Insert raw stream_event_log rows.

    Example:
        async def test_listing(insert_events):
            await insert_events([make_event("evt-1", minutes_ago=0)])
    """
    from analytics_service.features.stream_events.models import StreamEvent

    async def _insert(rows: list[dict[str, Any]]) -> None:
        async with db_engine.begin() as conn:
            await conn.execute(insert(StreamEvent.__table__), rows)

    return _insert


@pytest.fixture
async def seeded_events(insert_events) -> list[dict[str, Any]]:
    """Store seeded with the ten reference events plus unrelated rows."""
    await insert_events(STREAM_EVENTS + OTHER_EVENTS)
    return STREAM_EVENTS


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(executor: SQLAlchemyExecutor) -> FastAPI:
    """FastAPI application whose routes run against the test store."""
    from analytics_service.app.main import create_app
    from analytics_service.core.dependencies import get_query_executor

    application = create_app()
    application.dependency_overrides[get_query_executor] = lambda: executor
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTPX client for the test application.

    Example:
        async def test_events(client):
            response = await client.get("/api/v1/streams/s1/events", params={...})
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
