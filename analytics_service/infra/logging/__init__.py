"""Logging infrastructure.

Structured logging on top of the standard library:
- JSONL format for Loki/Elasticsearch ingestion
- Automatic context injection (request_id, tenant_id, ...)
- Lazy evaluation for expensive debug messages
- OpenTelemetry trace correlation

Basic usage:
    import logging

    from analytics_service.infra.logging import get_lazy_logger, set_log_context

    logger = logging.getLogger(__name__)
    set_log_context(request_id="abc-123")
    logger.info("Processing request")  # includes request_id

    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"Expensive: {compute_heavy_data()}")
"""

from analytics_service.infra.logging.config import configure_logging, setup_logging
from analytics_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)
from analytics_service.infra.logging.formatters import JSONFormatter
from analytics_service.infra.logging.lazy import (
    LazyLoggerAdapter,
    get_lazy_logger,
)

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "LazyLoggerAdapter",
    "clear_log_context",
    "configure_logging",
    "get_lazy_logger",
    "get_log_context",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
]
