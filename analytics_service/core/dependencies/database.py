"""Database dependencies for FastAPI route handlers.

Routes receive a QueryExecutor rather than a session: every query the
executor runs checks out its own pooled connection, which lets the
pagination count query overlap the page query.

    @router.get("/events")
    async def list_events(executor: Executor) -> Page[EventResponse]:
        ...

Tests swap the store with ``app.dependency_overrides[get_query_executor]``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from analytics_service.core.database.executor import QueryExecutor
from analytics_service.infra.database import get_executor


def get_query_executor() -> QueryExecutor:
    """FastAPI dependency returning the analytics store executor."""
    return get_executor()


Executor = Annotated[QueryExecutor, Depends(get_query_executor)]


__all__ = ["Executor", "get_query_executor"]
