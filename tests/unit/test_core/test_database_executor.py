"""Unit tests for the store executor and error classification."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from analytics_service.core.database import QueryExecutor, SQLAlchemyExecutor, classify_store_error
from analytics_service.core.exceptions import (
    AppException,
    BadRequestException,
    GatewayTimeoutException,
    InternalServerException,
    ServiceUnavailableException,
)
from analytics_service.features.stream_events.models import StreamEvent


class _Result:
    def all(self):
        return []

    def scalar(self):
        return 7


class DelayedEngine:
    """Engine stub whose queries take ``delay`` seconds."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.executed: list = []

    @asynccontextmanager
    async def connect(self):
        yield self

    async def execute(self, statement, params=None):
        self.executed.append((statement, params))
        await asyncio.sleep(self.delay)
        return _Result()


class TestClassifyStoreError:
    """Tests for classify_store_error."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (TimeoutError(), GatewayTimeoutException),
            (PoolTimeoutError("pool exhausted"), ServiceUnavailableException),
            (OperationalError("SELECT 1", {}, Exception("gone")), ServiceUnavailableException),
            (InterfaceError("SELECT 1", {}, Exception("closed")), ServiceUnavailableException),
            (DisconnectionError("dropped"), ServiceUnavailableException),
            (
                DBAPIError("SELECT 1", {}, Exception("reset"), connection_invalidated=True),
                ServiceUnavailableException,
            ),
            (ProgrammingError("SELEC 1", {}, Exception("syntax")), InternalServerException),
            (RuntimeError("boom"), InternalServerException),
        ],
        ids=[
            "deadline",
            "pool-timeout",
            "operational",
            "interface",
            "disconnection",
            "invalidated",
            "programming",
            "unexpected",
        ],
    )
    def test_mapping(self, error: BaseException, expected: type[AppException]):
        classified = classify_store_error(error)

        assert type(classified) is expected
        assert classified.extra["error_type"] == type(error).__name__

    def test_app_exception_passthrough(self):
        error = BadRequestException(detail="bad")

        assert classify_store_error(error) is error


class TestSQLAlchemyExecutor:
    """Tests against the SQLite test store."""

    def test_satisfies_protocol(self, executor):
        assert isinstance(executor, QueryExecutor)

    async def test_fetch_all(self, executor, seeded_events):
        rows = await executor.fetch_all(
            select(StreamEvent.event_id)
            .where(StreamEvent.tenant_id == "tenant-2")
            .order_by(StreamEvent.event_id)
        )

        assert [row.event_id for row in rows] == ["evt-other-tenant"]

    async def test_fetch_scalar_textual(self, executor, seeded_events):
        total = await executor.fetch_scalar(
            "SELECT count(*) FROM stream_event_log WHERE stream_id = :stream",
            {"stream": "stream-2"},
        )

        assert total == 1

    async def test_store_error_translated(self, executor, caplog: pytest.LogCaptureFixture):
        """Driver errors never escape untranslated."""
        with caplog.at_level(logging.WARNING), pytest.raises(AppException) as exc_info:
            await executor.fetch_all("SELECT * FROM no_such_table")

        assert exc_info.value.status_code in (500, 503)
        assert isinstance(exc_info.value.__cause__, DBAPIError)
        assert any("Analytics query failed" in r.getMessage() for r in caplog.records)

    async def test_deadline_exceeded(self):
        executor = SQLAlchemyExecutor(DelayedEngine(1.0), query_timeout=0.01)

        with pytest.raises(GatewayTimeoutException) as exc_info:
            await executor.fetch_all(text("SELECT 1"))

        assert exc_info.value.status_code == 504

    async def test_no_deadline(self):
        engine = DelayedEngine(0)
        executor = SQLAlchemyExecutor(engine, query_timeout=None)

        assert await executor.fetch_scalar("SELECT 7") == 7
        # Empty params are passed as None
        assert engine.executed[0][1] is None

    async def test_slow_query_logged(self, caplog: pytest.LogCaptureFixture):
        executor = SQLAlchemyExecutor(DelayedEngine(0.05), slow_query_threshold=0.01)

        with caplog.at_level(logging.WARNING, logger="analytics_service.core.database.executor"):
            await executor.fetch_all(text("SELECT 1"))

        slow = [r for r in caplog.records if "Slow analytics query" in r.getMessage()]
        assert len(slow) == 1
        assert slow[0].threshold == 0.01

    async def test_fast_query_not_logged(self, caplog: pytest.LogCaptureFixture):
        executor = SQLAlchemyExecutor(DelayedEngine(0), slow_query_threshold=10.0)

        with caplog.at_level(logging.WARNING, logger="analytics_service.core.database.executor"):
            await executor.fetch_all(text("SELECT 1"))

        assert not [r for r in caplog.records if "Slow analytics query" in r.getMessage()]
