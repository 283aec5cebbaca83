"""Concurrent total-count query.

The count runs on its own task (and, through the executor, its own pooled
connection) while the page query executes, so a list request costs the
slower of the two queries rather than their sum.

A count is informational: when it fails the listing still succeeds with a
total of 0.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy.sql import Executable

    from analytics_service.core.database.executor import QueryExecutor

logger = logging.getLogger(__name__)


def count_async(
    executor: QueryExecutor,
    statement: Executable,
    params: Mapping[str, Any] | None = None,
    *,
    label: str,
) -> asyncio.Task[int]:
    """Start a count query in the background.

    Must be called from a running event loop. Await the returned task after
    the page query completes; cancel it if the request is abandoned.

    Args:
        executor: Executor used to run the count statement.
        statement: Statement returning a single integer.
        params: Bound parameters for textual statements.
        label: Query label for logs (e.g. "stream_events").

    Returns:
        Task resolving to the total, or 0 when the count fails.
    """
    return asyncio.create_task(
        _run_count(executor, statement, params, label),
        name=f"count:{label}",
    )


async def _run_count(
    executor: QueryExecutor,
    statement: Executable,
    params: Mapping[str, Any] | None,
    label: str,
) -> int:
    try:
        value = await executor.fetch_scalar(statement, params)
    except Exception as e:
        logger.info(
            "Count query failed for %s, reporting total 0",
            label,
            extra={"query_label": label, "error": str(e), "error_type": type(e).__name__},
        )
        return 0
    return int(value or 0)


__all__ = ["count_async"]
