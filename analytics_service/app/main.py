"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from analytics_service.app.exception_handlers import configure_exception_handlers
from analytics_service.app.lifespan import lifespan
from analytics_service.app.middleware import RequestIDMiddleware
from analytics_service.app.router import setup_routers
from analytics_service.core.settings import get_app_settings


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Settings are loaded once and cached via LRU cache.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = get_app_settings()

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    # Exception handlers before middleware
    configure_exception_handlers(app)
    app.add_middleware(RequestIDMiddleware)
    setup_routers(app, app_settings)

    return app


# Application instance for uvicorn
app = create_app()
