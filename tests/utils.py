"""Shared test data and helpers for pagination scenarios."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from analytics_service.core.pagination import PaginationRequest, resolve_pagination

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from analytics_service.core.pagination import Page

BASE_TIME = datetime(2025, 1, 15, 12, 0, 0)
WINDOW_START = BASE_TIME - timedelta(days=1)
WINDOW_END = BASE_TIME + timedelta(minutes=1)

TENANT_ID = "tenant-1"
STREAM_ID = "stream-1"


def make_event(
    event_id: str,
    *,
    minutes_ago: int,
    tenant_id: str = TENANT_ID,
    stream_id: str = STREAM_ID,
    node_id: str = "node-1",
    event_type: str = "stream_buffer",
    downloaded_bytes: int = 0,
    uploaded_bytes: int = 0,
) -> dict[str, Any]:
    """Build a stream_event_log row."""
    return {
        "event_id": event_id,
        "tenant_id": tenant_id,
        "stream_id": stream_id,
        "node_id": node_id,
        "timestamp": BASE_TIME - timedelta(minutes=minutes_ago),
        "event_type": event_type,
        "status": None,
        "downloaded_bytes": downloaded_bytes,
        "uploaded_bytes": uploaded_bytes,
    }


# Ten events of one stream; evt-03..evt-05 share a timestamp so the
# event_id tie-break decides their order.
STREAM_EVENTS = [
    make_event("evt-00", minutes_ago=0),
    make_event("evt-01", minutes_ago=1),
    make_event("evt-02", minutes_ago=2, event_type="stream_start"),
    make_event("evt-03", minutes_ago=3),
    make_event("evt-04", minutes_ago=3),
    make_event("evt-05", minutes_ago=3),
    make_event("evt-06", minutes_ago=6),
    make_event("evt-07", minutes_ago=7),
    make_event("evt-08", minutes_ago=8, event_type="stream_start"),
    make_event("evt-09", minutes_ago=9),
]

# Rows that must never show up in listings of (TENANT_ID, STREAM_ID)
OTHER_EVENTS = [
    make_event("evt-other-tenant", minutes_ago=1, tenant_id="tenant-2"),
    make_event("evt-other-stream", minutes_ago=1, stream_id="stream-2"),
    make_event("evt-too-old", minutes_ago=60 * 48),
]

# Base order: timestamp DESC, event_id DESC
EXPECTED_ORDER = [
    "evt-00",
    "evt-01",
    "evt-02",
    "evt-05",
    "evt-04",
    "evt-03",
    "evt-06",
    "evt-07",
    "evt-08",
    "evt-09",
]


async def walk_forward(
    fetch: Callable[..., Awaitable[Page[Any]]],
    limit: int,
    *,
    max_pages: int = 50,
) -> list[Page[Any]]:
    """Follow endCursor from the first page until hasNextPage is false."""
    pages: list[Page[Any]] = []
    after: str | None = None
    for _ in range(max_pages):
        page = await fetch(resolve_pagination(PaginationRequest(first=limit, after=after)))
        pages.append(page)
        if not page.page_info.has_next_page:
            return pages
        after = page.page_info.end_cursor
    raise AssertionError("forward walk did not terminate")


async def walk_backward(
    fetch: Callable[..., Awaitable[Page[Any]]],
    limit: int,
    *,
    max_pages: int = 50,
) -> list[Page[Any]]:
    """Follow startCursor from the oldest page until hasPreviousPage is false."""
    pages: list[Page[Any]] = []
    before: str | None = None
    for _ in range(max_pages):
        page = await fetch(resolve_pagination(PaginationRequest(last=limit, before=before)))
        pages.append(page)
        if not page.page_info.has_previous_page:
            return pages
        before = page.page_info.start_cursor
    raise AssertionError("backward walk did not terminate")
