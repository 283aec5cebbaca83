"""Core database package.

Base:
    - Base: Declarative base with consistent constraint naming

Execution:
    - QueryExecutor: fetch_all / fetch_scalar contract used by pagination
    - SQLAlchemyExecutor: QueryExecutor over an AsyncEngine, one pooled
      connection per query
    - classify_store_error: Map store failures to HTTP-facing exceptions
"""

from .base import NAMING_CONVENTION, Base
from .executor import QueryExecutor, SQLAlchemyExecutor, classify_store_error

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "QueryExecutor",
    "SQLAlchemyExecutor",
    "classify_store_error",
]
