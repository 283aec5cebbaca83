"""Query execution against the analytics store.

The pagination engine only needs two operations from the store: fetch every
row of a statement, or fetch a single value. QueryExecutor captures that
contract; SQLAlchemyExecutor implements it over an AsyncEngine.

Each call checks out its own pooled connection. That is what lets the total
count run concurrently with the page query: an AsyncSession (or a single
connection) cannot execute two statements at once.

Store failures are translated into the application exception taxonomy:

    TimeoutError (query deadline)          -> GatewayTimeoutException (504)
    OperationalError / InterfaceError /
    DisconnectionError / pool timeout      -> ServiceUnavailableException (503)
    any other SQLAlchemyError              -> InternalServerException (500)
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from analytics_service.core.exceptions import (
    AppException,
    GatewayTimeoutException,
    InternalServerException,
    ServiceUnavailableException,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import CursorResult, Row
    from sqlalchemy.ext.asyncio import AsyncEngine
    from sqlalchemy.sql import Executable

R = TypeVar("R")

logger = logging.getLogger(__name__)


@runtime_checkable
class QueryExecutor(Protocol):
    """Minimal store contract used by the pagination engine."""

    async def fetch_all(
        self,
        statement: Executable | str,
        params: Mapping[str, Any] | None = None,
    ) -> Sequence[Row[Any]]:
        """Run ``statement`` and return its rows in store order."""
        ...

    async def fetch_scalar(
        self,
        statement: Executable | str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Run ``statement`` and return the first column of the first row."""
        ...


def classify_store_error(error: BaseException) -> AppException:
    """Map a store failure to an application exception.

    Args:
        error: Exception raised while executing a query.

    Returns:
        The AppException to raise in its place. Application exceptions are
        returned unchanged.
    """
    if isinstance(error, AppException):
        return error

    # Pool checkout timeout is a SQLAlchemyError, not a builtin TimeoutError
    if isinstance(error, PoolTimeoutError):
        return ServiceUnavailableException(
            detail="Analytics store connection pool exhausted",
            extra={"error_type": type(error).__name__},
        )
    if isinstance(error, TimeoutError):
        return GatewayTimeoutException(
            detail="Analytics query exceeded its deadline",
            extra={"error_type": type(error).__name__},
        )
    if isinstance(error, OperationalError | InterfaceError | DisconnectionError) or (
        isinstance(error, DBAPIError) and error.connection_invalidated
    ):
        return ServiceUnavailableException(
            detail="Analytics store is temporarily unavailable",
            extra={"error_type": type(error).__name__},
        )
    return InternalServerException(
        detail="Analytics query failed",
        extra={"error_type": type(error).__name__},
    )


class SQLAlchemyExecutor:
    """QueryExecutor backed by a SQLAlchemy AsyncEngine.

    Example:
        executor = SQLAlchemyExecutor(engine, query_timeout=30.0)
        rows = await executor.fetch_all(select(StreamEvent).limit(10))
        total = await executor.fetch_scalar("SELECT count(*) FROM stream_events")
    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        query_timeout: float | None = None,
        slow_query_threshold: float | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            engine: Engine whose pool provides one connection per query.
            query_timeout: Deadline in seconds for each query; None disables it.
            slow_query_threshold: Log queries slower than this many seconds.
        """
        self.engine = engine
        self.query_timeout = query_timeout
        self.slow_query_threshold = slow_query_threshold

    async def fetch_all(
        self,
        statement: Executable | str,
        params: Mapping[str, Any] | None = None,
    ) -> Sequence[Row[Any]]:
        return await self._run(statement, params, lambda result: result.all())

    async def fetch_scalar(
        self,
        statement: Executable | str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        return await self._run(statement, params, lambda result: result.scalar())

    async def _run(
        self,
        statement: Executable | str,
        params: Mapping[str, Any] | None,
        consume: Callable[[CursorResult[Any]], R],
    ) -> R:
        if isinstance(statement, str):
            statement = text(statement)

        start = time.perf_counter()
        try:
            async with asyncio.timeout(self.query_timeout):
                async with self.engine.connect() as conn:
                    result = await conn.execute(statement, dict(params) if params else None)
                    return consume(result)
        except (TimeoutError, SQLAlchemyError) as e:
            app_error = classify_store_error(e)
            logger.warning(
                "Analytics query failed: %s",
                app_error.detail,
                extra={
                    "status_code": app_error.status_code,
                    "error_type": type(e).__name__,
                    "timeout": self.query_timeout,
                },
            )
            raise app_error from e
        finally:
            duration = time.perf_counter() - start
            if self.slow_query_threshold is not None and duration > self.slow_query_threshold:
                logger.warning(
                    "Slow analytics query (%.3fs)",
                    duration,
                    extra={"duration": duration, "threshold": self.slow_query_threshold},
                )


__all__ = [
    "QueryExecutor",
    "SQLAlchemyExecutor",
    "classify_store_error",
]
