"""Cursor encoding and decoding for keyset pagination.

A cursor is an opaque string that encodes the position of one row in an
ordered result stream: the value of the primary order column plus the
tie-break key(s) that make that position unique.

The cursor format is:
1. JSON object with short keys
2. Base64 URL-safe encoded for use in query strings

Payload forms:
    {"t": "2025-01-15T10:30:00+00:00", "k": ["evt-123"]}        timestamp ordering
    {"t": "2025-01-15T10:30:00+00:00", "k": ["stream-a", "n1"]}  compound tie-break
    {"s": 1048576, "k": ["stream-a"]}                             integer sort key

Compound tie-break keys are stored as a JSON array rather than joined with a
delimiter, so a key containing ``|`` or ``:`` round-trips unchanged.

Cursors are only meaningful for the query and ordering that produced them;
they are never persisted server-side.
"""

from __future__ import annotations

import base64
import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from analytics_service.core.exceptions import InvalidCursorException

# Sort keys are raw int64 totals in the store
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class CursorData(BaseModel):
    """Decoded cursor position.

    Exactly one of ``timestamp`` and ``sort_key`` is set.

    Attributes:
        timestamp: Value of the primary (temporal) order column.
        sort_key: Raw integer value of a non-temporal order column
            (e.g. egress bytes), used instead of ``timestamp``.
        keys: Tie-break values, in tie-break column order.
    """

    timestamp: datetime | None = Field(default=None, alias="t")
    sort_key: int | None = Field(default=None, alias="s", ge=INT64_MIN, le=INT64_MAX)
    keys: tuple[str, ...] = Field(default=(), alias="k")

    model_config = {"frozen": True, "populate_by_name": True, "extra": "forbid"}

    @model_validator(mode="after")
    def check_primary(self) -> CursorData:
        """Require exactly one primary ordering value."""
        if (self.timestamp is None) == (self.sort_key is None):
            msg = "cursor must carry exactly one of timestamp or sort key"
            raise ValueError(msg)
        return self

    @property
    def id(self) -> str:
        """Single tie-break key (empty string when the cursor has none)."""
        return self.keys[0] if self.keys else ""

    @property
    def primary(self) -> datetime | int:
        """The primary ordering value, whichever form the cursor uses."""
        if self.sort_key is not None:
            return self.sort_key
        assert self.timestamp is not None
        return self.timestamp


class CursorCodec:
    """Encode and decode pagination cursors.

    Usage:
        cursor = CursorCodec.encode(CursorData(timestamp=event.timestamp, keys=(event.event_id,)))
        data = CursorCodec.decode(cursor)
        data.timestamp, data.id
    """

    @staticmethod
    def encode(data: CursorData) -> str:
        """Encode cursor data to an opaque URL-safe string."""
        payload: dict[str, Any] = {"k": list(data.keys)}
        if data.sort_key is not None:
            payload["s"] = data.sort_key
        else:
            assert data.timestamp is not None
            payload["t"] = data.timestamp.isoformat()
        json_str = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        return base64.urlsafe_b64encode(json_str.encode()).decode()

    @staticmethod
    def decode(cursor: str) -> CursorData:
        """Decode a cursor string.

        Raises:
            InvalidCursorException: If the token is not valid base64, not JSON,
                or does not describe a cursor.
        """
        try:
            raw = base64.urlsafe_b64decode(cursor.encode())
            payload = json.loads(raw.decode())
            return CursorData.model_validate(payload)
        except (ValueError, TypeError, ValidationError) as e:
            # binascii.Error, UnicodeDecodeError and JSONDecodeError are ValueErrors
            raise InvalidCursorException(
                detail="invalid cursor",
                extra={"reason": type(e).__name__},
            ) from e


def encode_cursor(timestamp: datetime, *keys: str) -> str:
    """Encode a (timestamp, tie-break...) cursor.

    One key gives the common ``(timestamp, id)`` form; several keys encode a
    compound tie-break such as ``(stream_id, node_id)``.
    """
    return CursorCodec.encode(CursorData(timestamp=timestamp, keys=tuple(keys)))


def encode_cursor_with_sort_key(sort_key: int, *keys: str) -> str:
    """Encode a cursor for an integer (non-temporal) order column."""
    return CursorCodec.encode(CursorData(sort_key=sort_key, keys=tuple(keys)))


def decode_cursor(cursor: str | None) -> CursorData | None:
    """Decode a request cursor; an absent or empty token means "no cursor"."""
    if not cursor:
        return None
    return CursorCodec.decode(cursor)


__all__ = [
    "CursorCodec",
    "CursorData",
    "decode_cursor",
    "encode_cursor",
    "encode_cursor_with_sort_key",
]
