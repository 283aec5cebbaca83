"""Pagination parameter resolution.

Turns the raw Relay-style request fields ``first``/``after``/``last``/``before``
into a normalized PaginationPlan. Pure transformation, no I/O.

Rules:
    - ``last`` > 0 or a ``before`` cursor selects backward pagination; backward
      fields win when both sets are supplied.
    - Otherwise pagination is forward from ``after``.
    - Absent, zero or negative limits fall back to the default; limits above
      the maximum are clamped to it.
    - A malformed cursor is rejected before any query runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, Field

from analytics_service.core.exceptions import InvalidCursorException
from analytics_service.core.pagination.cursor import CursorData, decode_cursor
from analytics_service.core.settings import PaginationSettings, get_pagination_settings


class Direction(StrEnum):
    """Traversal direction relative to the base (newest-first) order."""

    FORWARD = "forward"
    BACKWARD = "backward"


class PaginationRequest(BaseModel):
    """Raw pagination fields of a list request. All optional."""

    first: int | None = Field(default=None, description="Forward page size")
    after: str | None = Field(default=None, description="Cursor to page forward from")
    last: int | None = Field(default=None, description="Backward page size")
    before: str | None = Field(default=None, description="Cursor to page backward from")

    model_config = {"frozen": True}


@dataclass(slots=True, frozen=True)
class PaginationPlan:
    """Resolved pagination for one request.

    Attributes:
        limit: Page size, always within [1, max_limit].
        direction: Traversal direction.
        cursor: Decoded position to seek from, None for the first page.
    """

    limit: int
    direction: Direction = Direction.FORWARD
    cursor: CursorData | None = None

    @property
    def fetch_limit(self) -> int:
        """Rows to request from the store (one extra to detect more pages)."""
        return self.limit + 1

    @property
    def has_cursor(self) -> bool:
        return self.cursor is not None

    @property
    def is_backward(self) -> bool:
        return self.direction is Direction.BACKWARD


def clamp_limit(limit: int | None, settings: PaginationSettings | None = None) -> int:
    """Normalize a requested page size into [1, max_limit].

    Examples (default settings):
        clamp_limit(None) == 50
        clamp_limit(0) == 50
        clamp_limit(-1) == 50
        clamp_limit(501) == 500
    """
    settings = settings or get_pagination_settings()
    if limit is None or limit <= 0:
        return settings.default_limit
    return min(limit, settings.max_limit)


def resolve_pagination(
    request: PaginationRequest | None,
    *,
    settings: PaginationSettings | None = None,
) -> PaginationPlan:
    """Resolve raw request fields into a PaginationPlan.

    Args:
        request: Pagination fields from the request; None means defaults.
        settings: Limits to apply. Defaults to the cached PaginationSettings.

    Returns:
        The resolved plan.

    Raises:
        InvalidCursorException: If ``after`` or ``before`` cannot be decoded.
    """
    settings = settings or get_pagination_settings()
    if request is None:
        return PaginationPlan(limit=settings.default_limit)

    if (request.last is not None and request.last > 0) or request.before:
        return PaginationPlan(
            limit=clamp_limit(request.last, settings),
            direction=Direction.BACKWARD,
            cursor=_decode_field(request.before, "before"),
        )

    return PaginationPlan(
        limit=clamp_limit(request.first, settings),
        direction=Direction.FORWARD,
        cursor=_decode_field(request.after, "after"),
    )


def _decode_field(token: str | None, field: str) -> CursorData | None:
    try:
        return decode_cursor(token)
    except InvalidCursorException as e:
        raise InvalidCursorException(
            detail=f"invalid {field} cursor",
            extra={"field": field, **e.extra},
        ) from e


__all__ = [
    "Direction",
    "PaginationPlan",
    "PaginationRequest",
    "clamp_limit",
    "resolve_pagination",
]
