"""Repository for the stream events feature.

Two keyset-paginated listings over ``stream_event_log``:

- events of one stream, newest first, ordered by ``(timestamp, event_id)``
- per-stream traffic totals of a tenant, ordered by a raw integer total
  with ``stream_id`` as tie-break (sort-key cursors)

Every query is scoped to a tenant and a time window.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from analytics_service.core.exceptions import BadRequestException
from analytics_service.core.pagination import KeysetBuilder, KeysetPaginator, Page
from analytics_service.features.stream_events.models import StreamEvent
from analytics_service.features.stream_events.schemas import (
    SortOrder,
    StreamEventResponse,
    StreamSummaryResponse,
    StreamSummarySortField,
)
from analytics_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.engine import Row

    from analytics_service.core.database.executor import QueryExecutor
    from analytics_service.core.pagination import PaginationPlan

lazy_logger = get_lazy_logger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def resolve_time_range(
    start: datetime | None,
    end: datetime | None,
    *,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Fill in a missing time window bound.

    A missing end is "now"; a missing start is 24 hours before the end.
    Bounds are normalized to UTC; bounds without an offset are taken as UTC.

    Raises:
        BadRequestException: If start is after end.
    """
    end = _as_utc(end or now or datetime.now(UTC))
    start = _as_utc(start) if start else end - DEFAULT_WINDOW
    if start > end:
        raise BadRequestException(
            detail="invalid time range: start is after end",
            extra={"start": start.isoformat(), "end": end.isoformat()},
        )
    return start, end


def _event_from_row(row: Row[Any]) -> StreamEventResponse:
    return StreamEventResponse.model_validate(dict(row._mapping))


def _summary_from_row(row: Row[Any]) -> StreamSummaryResponse:
    return StreamSummaryResponse.model_validate(dict(row._mapping))


class StreamEventRepository:
    """Keyset-paginated queries over the stream event log."""

    events_keyset = KeysetBuilder(StreamEvent.timestamp, [StreamEvent.event_id])

    async def list_events(
        self,
        executor: QueryExecutor,
        plan: PaginationPlan,
        *,
        tenant_id: str,
        stream_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        event_type: str | None = None,
        include_total: bool | None = None,
    ) -> Page[StreamEventResponse]:
        """List events of one stream, newest first.

        Args:
            executor: Store executor.
            plan: Resolved pagination plan.
            tenant_id: Owning tenant.
            stream_id: Stream whose events are listed.
            start: Window start (defaults to 24h before ``end``).
            end: Window end (defaults to now).
            event_type: Only return events of this type.
            include_total: Run the count query (defaults to settings).
        """
        start, end = resolve_time_range(start, end)

        stmt = select(StreamEvent.__table__).where(
            StreamEvent.tenant_id == tenant_id,
            StreamEvent.stream_id == stream_id,
            StreamEvent.timestamp >= start,
            StreamEvent.timestamp <= end,
        )
        if event_type:
            stmt = stmt.where(StreamEvent.event_type == event_type)

        keyset = self.events_keyset
        paginator: KeysetPaginator[StreamEventResponse] = KeysetPaginator(
            executor,
            keyset,
            row_mapper=_event_from_row,
            cursor_for=lambda item: keyset.encode_cursor(item.timestamp, item.event_id),
            label="stream_events",
        )
        return await paginator.paginate(stmt, plan, include_total=include_total)

    async def list_summaries(
        self,
        executor: QueryExecutor,
        plan: PaginationPlan,
        *,
        tenant_id: str,
        sort_by: StreamSummarySortField = StreamSummarySortField.EGRESS_BYTES,
        sort_order: SortOrder = SortOrder.DESC,
        start: datetime | None = None,
        end: datetime | None = None,
        include_total: bool | None = None,
    ) -> Page[StreamSummaryResponse]:
        """List per-stream traffic totals of a tenant.

        Ordered by the raw integer ``sort_by`` total, ties broken by
        ``stream_id``. Cursors carry the integer total as a sort key so the
        seek compares exact values.
        """
        start, end = resolve_time_range(start, end)

        totals = (
            select(
                StreamEvent.stream_id.label("stream_id"),
                func.count().label("event_count"),
                func.coalesce(func.sum(StreamEvent.downloaded_bytes), 0).label("egress_bytes"),
                func.coalesce(func.sum(StreamEvent.uploaded_bytes), 0).label("ingress_bytes"),
            )
            .where(
                StreamEvent.tenant_id == tenant_id,
                StreamEvent.timestamp >= start,
                StreamEvent.timestamp <= end,
            )
            .group_by(StreamEvent.stream_id)
            .subquery("stream_totals")
        )
        stmt = select(totals)

        keyset = KeysetBuilder(
            totals.c[sort_by.value],
            [totals.c.stream_id],
            descending=sort_order is SortOrder.DESC,
            primary="sort_key",
        )
        paginator: KeysetPaginator[StreamSummaryResponse] = KeysetPaginator(
            executor,
            keyset,
            row_mapper=_summary_from_row,
            cursor_for=lambda item: keyset.encode_cursor(
                getattr(item, sort_by.value), item.stream_id
            ),
            label="stream_summaries",
        )
        lazy_logger.debug(
            lambda: f"stream summaries: tenant={tenant_id} sort={sort_by}:{sort_order}"
        )
        return await paginator.paginate(stmt, plan, include_total=include_total)


_stream_event_repository: StreamEventRepository | None = None


def get_stream_event_repository() -> StreamEventRepository:
    """Get the shared StreamEventRepository instance (FastAPI dependency)."""
    global _stream_event_repository
    if _stream_event_repository is None:
        _stream_event_repository = StreamEventRepository()
    return _stream_event_repository


__all__ = [
    "StreamEventRepository",
    "get_stream_event_repository",
    "resolve_time_range",
]
