"""Context management for structured logging.

A contextvars-backed dict of fields (request_id, tenant_id, query label, ...)
that ContextInjectingFilter copies onto every LogRecord. Each asyncio task
gets its own copy, so a count task spawned from a request inherits the
request's context without sharing it.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        ```python
        set_log_context(request_id="abc-123", tenant_id="t-1")
        logger.info("Listing stream events")  # record carries both fields
        ```
    """
    current = dict(_log_context.get() or {})
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return dict(_log_context.get() or {})


def clear_log_context() -> None:
    """Drop all logging context for the current task."""
    _log_context.set({})


def remove_from_log_context(*keys: str) -> None:
    """Remove specific keys from the logging context."""
    current = dict(_log_context.get() or {})
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that copies the contextvars log context onto records.

    Attached to handlers by configure_logging() so formatters (especially
    JSONFormatter) see the fields without any change to logging calls.
    Attributes already present on the record are never overwritten.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject context into the record; always lets it through."""
        for key, value in (_log_context.get() or {}).items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


__all__ = [
    "ContextInjectingFilter",
    "clear_log_context",
    "get_log_context",
    "remove_from_log_context",
    "set_log_context",
]
