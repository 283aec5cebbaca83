"""Keyset (seek) conditions for SQLAlchemy queries.

Keyset pagination filters on "rows strictly after/before this exact tuple"
instead of skipping N rows, so the store can seek along its sort order rather
than scanning and discarding every preceding row on each page.

How it works:
    For base order (ts DESC, id DESC) and a cursor at (t1, id1):

    forward  -> WHERE (ts, id) < (t1, id1) ORDER BY ts DESC, id DESC
    backward -> WHERE (ts, id) > (t1, id1) ORDER BY ts ASC, id ASC

    Backward pages come back nearest-first and are reversed afterwards so the
    caller always sees the base order. An ascending base order flips both
    the operator and the ORDER BY.

The comparison is a row-value (tuple) comparison, which is lexicographic.
Expanding it into per-column ``a < x AND b < y`` terms is not equivalent and
skips rows at page boundaries.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import bindparam, literal_column, tuple_
from sqlalchemy.sql.sqltypes import NullType

from analytics_service.core.exceptions import InvalidCursorException
from analytics_service.core.pagination.cursor import (
    CursorData,
    encode_cursor,
    encode_cursor_with_sort_key,
)
from analytics_service.core.pagination.params import Direction, PaginationPlan

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.engine import Dialect
    from sqlalchemy.sql.elements import ColumnElement

    ColumnLike = ColumnElement[Any] | str

PrimaryKind = Literal["timestamp", "sort_key"]


def _as_column(column: Any) -> ColumnElement[Any]:
    """Coerce a column name/expression string or ORM attribute to a column element."""
    if isinstance(column, str):
        return literal_column(column)
    if hasattr(column, "__clause_element__"):
        return column.__clause_element__()
    return column


class KeysetBuilder:
    """Build keyset WHERE and ORDER BY clauses for one ordering.

    The ordering is ``(order_column, *tie_break_columns)``. Tie-break columns
    are required whenever the order column is not unique per row; without
    them rows sharing an order value can be skipped or duplicated across
    page boundaries.

    Example:
        keyset = KeysetBuilder(StreamEvent.timestamp, [StreamEvent.event_id])
        stmt = keyset.apply(select(StreamEvent).where(...), plan)
        stmt = stmt.limit(plan.fetch_limit)

        # Textual SQL (e.g. a hand-written analytical query)
        sql, params = KeysetBuilder("timestamp", ["event_id"]).compile_condition(plan)
    """

    def __init__(
        self,
        order_column: ColumnLike,
        tie_break_columns: Sequence[ColumnLike] = (),
        *,
        descending: bool = True,
        primary: PrimaryKind = "timestamp",
    ) -> None:
        """Initialize keyset builder.

        Args:
            order_column: Primary order column (timestamp or integer sort key).
                Strings are used verbatim, so expressions such as
                ``concat(stream_id, ':', node_id)`` are allowed.
            tie_break_columns: Columns that make the order unique per row.
            descending: Base order of the listing; newest-first by default.
            primary: Which cursor component feeds the order column.
        """
        self.order_column = _as_column(order_column)
        self.tie_break_columns = tuple(_as_column(c) for c in tie_break_columns)
        self.descending = descending
        self.primary = primary

    @property
    def columns(self) -> tuple[ColumnElement[Any], ...]:
        return (self.order_column, *self.tie_break_columns)

    def _seeks_lower(self, plan: PaginationPlan) -> bool:
        """Whether the seek condition compares with ``<`` (and orders DESC)."""
        return (plan.direction is Direction.FORWARD) == self.descending

    def _primary_value(self, cursor: CursorData) -> datetime | int:
        value = cursor.timestamp if self.primary == "timestamp" else cursor.sort_key
        if value is None:
            raise InvalidCursorException(
                detail=f"invalid cursor: expected a {self.primary.replace('_', ' ')} cursor",
                extra={"expected": self.primary},
            )
        return value

    def condition(
        self,
        plan: PaginationPlan,
        cursor_parts: Sequence[str] | None = None,
    ) -> ColumnElement[bool] | None:
        """Build the seek predicate for ``plan``.

        Args:
            plan: Resolved pagination plan.
            cursor_parts: Tie-break values to seek from. Defaults to the keys
                stored in the plan's cursor.

        Returns:
            The predicate with its values as bound parameters, or None on the
            first page (no cursor).

        Raises:
            InvalidCursorException: If the number of tie-break values does not
                match the number of tie-break columns, or the cursor carries
                the wrong kind of primary value.
        """
        cursor = plan.cursor
        if cursor is None:
            return None

        parts = tuple(cursor.keys if cursor_parts is None else cursor_parts)
        expected = len(self.tie_break_columns)
        if len(parts) != expected:
            raise InvalidCursorException(
                detail=f"invalid cursor tuple: expected {expected} parts, got {len(parts)}",
                extra={"expected": expected, "got": len(parts)},
            )

        primary = bindparam(
            "keyset_0",
            self._primary_value(cursor),
            type_=None if isinstance(self.order_column.type, NullType) else self.order_column.type,
        )
        binds = [primary] + [
            bindparam(f"keyset_{i}", part) for i, part in enumerate(parts, start=1)
        ]

        if self.tie_break_columns:
            lhs: Any = tuple_(*self.columns)
            rhs: Any = tuple_(*binds)
        else:
            lhs, rhs = self.order_column, primary

        return lhs < rhs if self._seeks_lower(plan) else lhs > rhs

    def compile_condition(
        self,
        plan: PaginationPlan,
        cursor_parts: Sequence[str] | None = None,
        dialect: Dialect | None = None,
    ) -> tuple[str, dict[str, Any]]:
        """Render the seek predicate as SQL text plus its bound parameters.

        Returns ``("", {})`` on the first page.
        """
        clause = self.condition(plan, cursor_parts)
        if clause is None:
            return "", {}
        compiled = clause.compile(dialect=dialect)
        return str(compiled), dict(compiled.params)

    def order_by(self, plan: PaginationPlan) -> list[ColumnElement[Any]]:
        """ORDER BY terms for ``plan``: every column in the same direction."""
        if self._seeks_lower(plan):
            return [column.desc() for column in self.columns]
        return [column.asc() for column in self.columns]

    def apply(
        self,
        statement: Select[Any],
        plan: PaginationPlan,
        cursor_parts: Sequence[str] | None = None,
    ) -> Select[Any]:
        """Append the seek predicate and ORDER BY to ``statement``.

        LIMIT is left to the caller, which requests ``plan.fetch_limit`` rows.
        """
        clause = self.condition(plan, cursor_parts)
        if clause is not None:
            statement = statement.where(clause)
        return statement.order_by(*self.order_by(plan))

    def encode_cursor(self, primary_value: datetime | int, *keys: str) -> str:
        """Encode a cursor of the kind this ordering consumes."""
        if self.primary == "sort_key":
            return encode_cursor_with_sort_key(int(primary_value), *keys)
        assert isinstance(primary_value, datetime)
        return encode_cursor(primary_value, *keys)


__all__ = ["KeysetBuilder", "PrimaryKind"]
