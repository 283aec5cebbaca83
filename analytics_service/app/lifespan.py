"""Application lifespan management.

Startup Order:
1. Logging
2. Analytics store connectivity check (optional)

Shutdown Order: reverse of startup.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from analytics_service.core.settings import get_app_settings, get_logging_settings
from analytics_service.infra.database import close_database, init_database
from analytics_service.infra.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    app_settings = get_app_settings()

    setup_logging(get_logging_settings())
    logger.info(
        "Starting application",
        extra={"title": app.title, "version": app_settings.version},
    )

    if app_settings.check_database_on_startup:
        await init_database()

    try:
        yield
    finally:
        logger.info("Shutting down application")
        await close_database()


__all__ = ["lifespan"]
