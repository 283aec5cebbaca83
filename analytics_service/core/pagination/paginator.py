"""Keyset pagination control flow.

One call to KeysetPaginator.paginate() runs the whole request:

    1. keyset condition + ORDER BY appended to the filtered statement
       (cursor shape is validated here, before any I/O)
    2. count query started on its own task
    3. page query executed with LIMIT limit+1
    4. window trimmed (and reversed for backward pages), rows mapped
    5. boundary cursors encoded from the final first/last items
    6. count joined, page envelope built

If the page query fails or the request is cancelled, the count task is
cancelled with it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func, select

from analytics_service.core.pagination.count import count_async
from analytics_service.core.pagination.response import (
    build_page_info,
    find_cursor_collisions,
    trim_window,
)
from analytics_service.core.pagination.schemas import Page
from analytics_service.core.settings import PaginationSettings, get_pagination_settings
from analytics_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.engine import Row
    from sqlalchemy.sql import Executable

    from analytics_service.core.database.executor import QueryExecutor
    from analytics_service.core.pagination.keyset import KeysetBuilder
    from analytics_service.core.pagination.params import PaginationPlan

T = TypeVar("T")

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)

# Row mapping failures that skip the row instead of failing the page
ROW_MAPPING_ERRORS: tuple[type[Exception], ...] = (ValueError, TypeError, KeyError, LookupError)


def count_statement_for(statement: Select[Any]) -> Select[Any]:
    """Derive ``SELECT count(*)`` over the filtered (uncursored) statement."""
    return select(func.count()).select_from(statement.order_by(None).subquery())


class KeysetPaginator(Generic[T]):
    """Run keyset-paginated listings for one entity.

    Example:
        paginator = KeysetPaginator(
            executor,
            KeysetBuilder(StreamEvent.timestamp, [StreamEvent.event_id]),
            row_mapper=lambda row: StreamEventResponse.model_validate(row._mapping),
            cursor_for=lambda item: encode_cursor(item.timestamp, item.event_id),
            label="stream_events",
        )
        page = await paginator.paginate(select(...).where(...), plan)
    """

    def __init__(
        self,
        executor: QueryExecutor,
        keyset: KeysetBuilder,
        row_mapper: Callable[[Row[Any]], T],
        cursor_for: Callable[[T], str],
        label: str,
        *,
        settings: PaginationSettings | None = None,
    ) -> None:
        """Initialize paginator.

        Args:
            executor: Store executor; page and count run on separate connections.
            keyset: Ordering and seek condition for the listing.
            row_mapper: Converts a store row into an item. Raising one of
                ROW_MAPPING_ERRORS skips the row.
            cursor_for: Encodes the cursor of an item.
            label: Query label used in logs.
            settings: Pagination settings. Defaults to the cached settings.
        """
        self.executor = executor
        self.keyset = keyset
        self.row_mapper = row_mapper
        self.cursor_for = cursor_for
        self.label = label
        self.settings = settings or get_pagination_settings()

    async def paginate(
        self,
        statement: Select[Any],
        plan: PaginationPlan,
        *,
        count_statement: Executable | None = None,
        include_total: bool | None = None,
    ) -> Page[T]:
        """Fetch one page.

        Args:
            statement: Filtered base statement without ORDER BY or LIMIT.
            plan: Resolved pagination plan.
            count_statement: Statement returning the total; derived from
                ``statement`` when omitted.
            include_total: Run the count query. Defaults to the
                ``include_total`` setting; when disabled the total is 0.

        Returns:
            The page, items in the base order.

        Raises:
            InvalidCursorException: If the cursor does not fit the ordering.
            AppException: Store failures raised by the executor.
        """
        page_statement = self.keyset.apply(statement, plan).limit(plan.fetch_limit)

        if include_total is None:
            include_total = self.settings.include_total
        count_task: asyncio.Task[int] | None = None
        if include_total:
            count_task = count_async(
                self.executor,
                count_statement if count_statement is not None else count_statement_for(statement),
                label=self.label,
            )

        try:
            rows = await self.executor.fetch_all(page_statement)
            window, _ = trim_window(rows, plan.limit, plan.direction)
            items = self._map_rows(window)

            cursors = self._boundary_cursors(items)
            start_cursor = cursors[0] if cursors else None
            end_cursor = cursors[-1] if cursors else None

            total_count = await count_task if count_task is not None else 0
        except BaseException:
            if count_task is not None and not count_task.done():
                count_task.cancel()
            raise

        lazy_logger.debug(
            lambda: (
                f"{self.label}: direction={plan.direction} limit={plan.limit} "
                f"fetched={len(rows)} returned={len(items)} total={total_count}"
            )
        )

        return Page(
            items=items,
            page_info=build_page_info(
                len(rows),
                plan.limit,
                plan.direction,
                total_count,
                start_cursor,
                end_cursor,
                cursor_supplied=plan.has_cursor,
            ),
        )

    def _map_rows(self, rows: Sequence[Row[Any]]) -> list[T]:
        items: list[T] = []
        for row in rows:
            try:
                items.append(self.row_mapper(row))
            except ROW_MAPPING_ERRORS as e:
                logger.warning(
                    "Skipping unmappable row in %s",
                    self.label,
                    extra={"query_label": self.label, "error": str(e), "error_type": type(e).__name__},
                )
        return items

    def _boundary_cursors(self, items: list[T]) -> list[str]:
        """Cursors of the first and last item (every item when collisions are checked)."""
        if not items:
            return []
        if not self.settings.detect_cursor_collisions:
            return [self.cursor_for(items[0]), self.cursor_for(items[-1])]

        cursors = [self.cursor_for(item) for item in items]
        for cursor in find_cursor_collisions(cursors):
            logger.warning(
                "Cursor collision detected in %s",
                self.label,
                extra={"query_label": self.label, "cursor": cursor},
            )
        return cursors


__all__ = ["ROW_MAPPING_ERRORS", "KeysetPaginator", "count_statement_for"]
