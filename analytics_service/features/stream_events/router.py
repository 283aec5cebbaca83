"""API router for the stream events feature."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from analytics_service.core.dependencies import CursorPagination, Executor
from analytics_service.core.exceptions import BadRequestException
from analytics_service.features.stream_events.repository import (
    StreamEventRepository,
    get_stream_event_repository,
)
from analytics_service.features.stream_events.schemas import (
    SortOrder,
    StreamEventPage,
    StreamSummaryPage,
    StreamSummarySortField,
)
from analytics_service.infra.logging import get_lazy_logger, set_log_context

router = APIRouter(prefix="/streams", tags=["stream-events"])

# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)

Repository = Annotated[StreamEventRepository, Depends(get_stream_event_repository)]


def _require_tenant(tenant_id: str | None) -> str:
    if not tenant_id:
        raise BadRequestException(detail="tenant_id required", extra={"field": "tenant_id"})
    set_log_context(tenant_id=tenant_id)
    return tenant_id


@router.get(
    "/summaries",
    response_model=StreamSummaryPage,
    summary="List per-stream traffic totals",
    description="""
Per-stream totals for a tenant over a time window, ordered by a raw integer
total (`sortBy`) with the stream ID as tie-break.

Paginate forward with `first`/`after` and backward with `last`/`before`;
cursors are opaque and only valid for the same `sortBy`/`sortOrder`.
""",
)
async def list_stream_summaries(
    pagination: CursorPagination,
    executor: Executor,
    repo: Repository,
    tenant_id: str | None = None,
    sort_by: Annotated[StreamSummarySortField, Query(alias="sortBy")] = (
        StreamSummarySortField.EGRESS_BYTES
    ),
    sort_order: Annotated[SortOrder, Query(alias="sortOrder")] = SortOrder.DESC,
    start: datetime | None = None,
    end: datetime | None = None,
) -> StreamSummaryPage:
    """List per-stream traffic totals for a tenant."""
    tenant_id = _require_tenant(tenant_id)
    return await repo.list_summaries(
        executor,
        pagination,
        tenant_id=tenant_id,
        sort_by=sort_by,
        sort_order=sort_order,
        start=start,
        end=end,
    )


@router.get(
    "/{stream_id}/events",
    response_model=StreamEventPage,
    summary="List stream events",
    description="""
Events of one stream, newest first, with bidirectional cursor pagination.

**Usage:**
1. First page: `GET /streams/{id}/events?tenant_id=t&first=50`
2. Older events: `...&first=50&after={pageInfo.endCursor}`
3. Newer events: `...&last=50&before={pageInfo.startCursor}`

`pageInfo.totalCount` is the number of events in the window (0 if the
count could not be computed).
""",
)
async def list_stream_events(
    stream_id: str,
    pagination: CursorPagination,
    executor: Executor,
    repo: Repository,
    tenant_id: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    event_type: str | None = None,
) -> StreamEventPage:
    """List events of a stream."""
    tenant_id = _require_tenant(tenant_id)
    set_log_context(stream_id=stream_id)

    page = await repo.list_events(
        executor,
        pagination,
        tenant_id=tenant_id,
        stream_id=stream_id,
        start=start,
        end=end,
        event_type=event_type,
    )
    lazy_logger.debug(
        lambda: f"stream {stream_id}: {len(page.items)} events, total={page.page_info.total_count}"
    )
    return page
