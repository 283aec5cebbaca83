"""Pydantic schemas for the stream events feature."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from analytics_service.core.pagination import Page

_BYTES_PER_GB = 1024.0 * 1024.0 * 1024.0


class StreamEventResponse(BaseModel):
    """Stream event as returned by the API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    event_id: str
    stream_id: str
    node_id: str
    timestamp: datetime
    event_type: str
    status: str | None = None
    downloaded_bytes: int = 0
    uploaded_bytes: int = 0


class StreamSummarySortField(StrEnum):
    """Raw integer columns a stream summary listing can be ordered by."""

    EGRESS_BYTES = "egress_bytes"
    INGRESS_BYTES = "ingress_bytes"
    EVENT_COUNT = "event_count"


class SortOrder(StrEnum):
    DESC = "desc"
    ASC = "asc"


class StreamSummaryResponse(BaseModel):
    """Per-stream traffic totals for a tenant.

    Ordering and cursors use the raw integer totals; ``egress_gb`` is for
    display only.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    stream_id: str
    event_count: int = Field(ge=0)
    egress_bytes: int = Field(ge=0)
    ingress_bytes: int = Field(ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def egress_gb(self) -> float:
        return self.egress_bytes / _BYTES_PER_GB


StreamEventPage = Page[StreamEventResponse]
StreamSummaryPage = Page[StreamSummaryResponse]


__all__ = [
    "SortOrder",
    "StreamEventPage",
    "StreamEventResponse",
    "StreamSummaryPage",
    "StreamSummaryResponse",
    "StreamSummarySortField",
]
