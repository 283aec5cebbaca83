"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from analytics_service.core.settings import get_app_settings
from analytics_service.features.stream_events.router import router as stream_events_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from analytics_service.core.settings import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        app_settings: Optional settings override for the API prefix.
    """
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    app.include_router(stream_events_router, prefix=api_prefix)

    logger.info("Routers configured", extra={"api_prefix": api_prefix})
