"""Response envelope for cursor-paginated listings.

Serialized in camelCase to match the public API:

    {
        "items": [...],
        "pageInfo": {
            "totalCount": 1234,
            "hasNextPage": true,
            "hasPreviousPage": false,
            "startCursor": "eyJ0Ij...",
            "endCursor": "eyJ0Ij..."
        }
    }
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class PageInfo(BaseModel):
    """Navigation metadata for one page."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_count: int = Field(default=0, ge=0, description="Total rows matching the filter (0 if unknown)")
    has_next_page: bool = Field(default=False, description="More rows exist after end_cursor")
    has_previous_page: bool = Field(default=False, description="More rows exist before start_cursor")
    start_cursor: str | None = Field(default=None, description="Cursor of the first item")
    end_cursor: str | None = Field(default=None, description="Cursor of the last item")


class Page(BaseModel, Generic[T]):
    """One page of items in the base (newest-first) order.

    Example:
        @router.get("/events", response_model=Page[StreamEventResponse])
        async def list_events(...): ...
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[T]
    page_info: PageInfo = Field(default_factory=PageInfo)


__all__ = ["Page", "PageInfo"]
