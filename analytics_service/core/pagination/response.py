"""Result window trimming and page flags.

The page query asks for ``limit + 1`` rows. The extra row only answers "is
there anything beyond this page?" and is never returned.

Flag semantics depend on direction:

    forward:  has_next_page = more rows fetched than limit
              has_previous_page = a cursor was supplied
    backward: has_previous_page = more rows fetched than limit
              has_next_page = a cursor was supplied

The cursor-supplied side is an approximation: arriving from a cursor implies
rows exist on the other side of it, without querying for them.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import TypeVar

from analytics_service.core.pagination.params import Direction
from analytics_service.core.pagination.schemas import PageInfo

T = TypeVar("T")


def trim_window(
    items: Sequence[T],
    limit: int,
    direction: Direction,
    *,
    results_len: int | None = None,
) -> tuple[list[T], bool]:
    """Trim the over-fetched window to one page in the base order.

    Args:
        items: Rows in store order (nearest-first for backward pages).
        limit: Requested page size.
        direction: Traversal direction of the query.
        results_len: Number of rows the store returned, when it differs from
            ``len(items)`` (rows skipped during mapping still count).

    Returns:
        Tuple of (page items, has_more).
    """
    fetched = len(items) if results_len is None else results_len
    has_more = fetched > limit
    page = list(items[:limit])
    if direction is Direction.BACKWARD:
        page.reverse()
    return page, has_more


def build_page_info(
    results_len: int,
    limit: int,
    direction: Direction,
    total_count: int,
    start_cursor: str | None,
    end_cursor: str | None,
    *,
    cursor_supplied: bool,
) -> PageInfo:
    """Build the PageInfo block for a page.

    Args:
        results_len: Rows returned by the store before trimming.
        limit: Requested page size.
        direction: Traversal direction of the query.
        total_count: Result of the count query (0 when unavailable).
        start_cursor: Cursor of the first item of the final page.
        end_cursor: Cursor of the last item of the final page.
        cursor_supplied: Whether the request carried a cursor.
    """
    has_more = results_len > limit
    if direction is Direction.BACKWARD:
        has_next, has_previous = cursor_supplied, has_more
    else:
        has_next, has_previous = has_more, cursor_supplied

    return PageInfo(
        total_count=total_count,
        has_next_page=has_next,
        has_previous_page=has_previous,
        start_cursor=start_cursor or None,
        end_cursor=end_cursor or None,
    )


def find_cursor_collisions(cursors: Iterable[str]) -> list[str]:
    """Return cursors that occur more than once within a page.

    Two rows sharing a cursor means the tie-break columns do not make the
    ordering unique, and pages built on it can skip or repeat rows.
    """
    counts = Counter(c for c in cursors if c)
    return [cursor for cursor, n in counts.items() if n > 1]


__all__ = ["build_page_info", "find_cursor_collisions", "trim_window"]
