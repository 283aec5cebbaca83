"""Logging configuration setup.

Console logging configured through logging.config.dictConfig:
- JSONL or human-readable text formatter
- ContextInjectingFilter for automatic context propagation
- All handlers on the root logger; package loggers propagate up
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from analytics_service.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Configure logging once from LoggingSettings.

    Args:
        log_settings: Settings to use. Defaults to the cached LoggingSettings.
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from analytics_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**{**log_settings.to_logging_kwargs(), **configure_kwargs})
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    include_context: bool = True,
    include_process_info: bool = False,
    service_name: str = "analytics-service",
    capture_warnings: bool = True,
) -> None:
    """Configure the root logger with dictConfig.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Emit JSON Lines instead of text.
        include_context: Attach ContextInjectingFilter to the console handler.
        include_process_info: Include process ID and name in records.
        service_name: Static ``service`` field for JSON records.
        capture_warnings: Forward Python warnings to logging.

    Example:
        configure_logging(log_level="DEBUG", json_logs=False)
    """
    if capture_warnings:
        logging.captureWarnings(True)

    logging.config.dictConfig(
        _build_dict_config(
            log_level=log_level,
            json_logs=json_logs,
            include_context=include_context,
            include_process_info=include_process_info,
            service_name=service_name,
        )
    )
    logger.debug("Logging configured (level=%s, json=%s)", log_level, json_logs)


def _build_dict_config(
    *,
    log_level: str,
    json_logs: bool,
    include_context: bool,
    include_process_info: bool,
    service_name: str,
) -> dict[str, Any]:
    """Build the dictConfig mapping for the console handler."""
    if json_logs:
        formatter: dict[str, Any] = {
            "()": "analytics_service.infra.logging.formatters.JSONFormatter",
            "static": {"service": service_name},
            "include_process_info": include_process_info,
        }
    else:
        parts = ["%(asctime)s", "%(levelname)s", "%(name)s"]
        if include_process_info:
            parts.append("[%(processName)s:%(process)d]")
        parts.append("%(message)s")
        formatter = {"format": " - ".join(parts), "datefmt": "%Y-%m-%d %H:%M:%S"}

    filters: dict[str, Any] = {}
    if include_context:
        filters["context"] = {
            "()": "analytics_service.infra.logging.context.ContextInjectingFilter",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "filters": filters,
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "default",
                "filters": list(filters),
                "level": log_level,
            },
        },
        "root": {"level": log_level, "handlers": ["console"]},
    }
