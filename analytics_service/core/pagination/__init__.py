"""Cursor-based keyset pagination for analytical listings.

Pagination that stays fast and stable on large append-mostly tables:
- Stable: rows inserted between requests don't shift pages
- Performant: seeks along an index instead of OFFSET scans
- Bidirectional: Relay-style first/after and last/before

Typical endpoint:
    @router.get("/events", response_model=Page[StreamEventResponse])
    async def list_events(
        pagination: CursorPagination,
        executor: Annotated[QueryExecutor, Depends(get_query_executor)],
    ) -> Page[StreamEventResponse]:
        paginator = KeysetPaginator(executor, keyset, row_mapper, cursor_for, "events")
        return await paginator.paginate(stmt, pagination)

Cursors are opaque base64 strings that clients pass back unchanged.
"""

from analytics_service.core.pagination.count import count_async
from analytics_service.core.pagination.cursor import (
    CursorCodec,
    CursorData,
    decode_cursor,
    encode_cursor,
    encode_cursor_with_sort_key,
)
from analytics_service.core.pagination.keyset import KeysetBuilder
from analytics_service.core.pagination.paginator import KeysetPaginator, count_statement_for
from analytics_service.core.pagination.params import (
    Direction,
    PaginationPlan,
    PaginationRequest,
    clamp_limit,
    resolve_pagination,
)
from analytics_service.core.pagination.response import (
    build_page_info,
    find_cursor_collisions,
    trim_window,
)
from analytics_service.core.pagination.schemas import Page, PageInfo

__all__ = [
    # Cursor codec
    "CursorCodec",
    "CursorData",
    "decode_cursor",
    "encode_cursor",
    "encode_cursor_with_sort_key",
    # Parameter resolution
    "Direction",
    "PaginationPlan",
    "PaginationRequest",
    "clamp_limit",
    "resolve_pagination",
    # Query building and execution
    "KeysetBuilder",
    "KeysetPaginator",
    "count_async",
    "count_statement_for",
    # Response shaping
    "Page",
    "PageInfo",
    "build_page_info",
    "find_cursor_collisions",
    "trim_window",
]
