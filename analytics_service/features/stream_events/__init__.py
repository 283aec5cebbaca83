"""Stream events feature package."""

from .repository import StreamEventRepository, get_stream_event_repository
from .router import router

__all__ = [
    "router",
    "StreamEventRepository",
    "get_stream_event_repository",
]
