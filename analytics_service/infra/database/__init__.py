"""Database infrastructure package.

Engine lifecycle for the analytics store:

    from analytics_service.infra.database import get_executor

    executor = get_executor()
    rows = await executor.fetch_all(stmt)
"""

from .session import (
    close_database,
    create_engine_from_settings,
    get_engine,
    get_executor,
    init_database,
)

__all__ = [
    "close_database",
    "create_engine_from_settings",
    "get_engine",
    "get_executor",
    "init_database",
]
