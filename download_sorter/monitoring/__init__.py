"""Monitoring module for filesystem events."""

from .watcher import (
    FileWatcherService,
    SortingEventHandler,
)
from .queue_manager import (
    EventDispatcher,
    DispatchStats,
)

__all__ = [
    "FileWatcherService",
    "SortingEventHandler",
    "EventDispatcher",
    "DispatchStats",
]
