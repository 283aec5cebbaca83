"""FastAPI dependencies shared by feature routers."""

from .database import Executor, get_query_executor
from .pagination import CursorPagination, get_cursor_pagination

__all__ = [
    "CursorPagination",
    "Executor",
    "get_cursor_pagination",
    "get_query_executor",
]
