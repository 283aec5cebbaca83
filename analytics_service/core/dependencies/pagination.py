"""Cursor pagination dependency for FastAPI routes.

Resolves the Relay-style query parameters ``first``/``after``/``last``/
``before`` into a PaginationPlan. Limits are normalized rather than
rejected (absent/zero/negative -> default, too large -> maximum); a
malformed cursor is a 400.

Usage:
    from analytics_service.core.dependencies.pagination import CursorPagination

    @router.get("/events")
    async def list_events(pagination: CursorPagination) -> Page[EventResponse]:
        return await paginator.paginate(stmt, pagination)
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query

from analytics_service.core.pagination.params import (
    PaginationPlan,
    PaginationRequest,
    resolve_pagination,
)
from analytics_service.core.settings import get_pagination_settings


def get_cursor_pagination(
    first: Annotated[
        int | None,
        Query(description="Page size when paging forward (newest first)"),
    ] = None,
    after: Annotated[
        str | None,
        Query(description="Cursor to continue forward from (endCursor of the previous page)"),
    ] = None,
    last: Annotated[
        int | None,
        Query(description="Page size when paging backward"),
    ] = None,
    before: Annotated[
        str | None,
        Query(description="Cursor to continue backward from (startCursor of the previous page)"),
    ] = None,
) -> PaginationPlan:
    """Resolve pagination query parameters into a plan.

    Raises:
        InvalidCursorException: If ``after`` or ``before`` is malformed.
    """
    return resolve_pagination(
        PaginationRequest(first=first, after=after, last=last, before=before),
        settings=get_pagination_settings(),
    )


CursorPagination = Annotated[PaginationPlan, Depends(get_cursor_pagination)]


__all__ = ["CursorPagination", "get_cursor_pagination"]
