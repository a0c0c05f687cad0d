"""
Filesystem Watcher
==================

Monitors the watched root for new files and hands them to the mover.
Only the root itself is watched; category subfolders are ignored.
"""

from pathlib import Path
from typing import Optional

from watchdog.observers import Observer
from watchdog.events import (
    FileSystemEventHandler,
    FileCreatedEvent,
    FileMovedEvent,
)

from download_sorter.actions.file_operations import FileMover, MoveOrigin
from download_sorter.monitoring.queue_manager import EventDispatcher
from download_sorter.utils.exceptions import WatcherSubscriptionError
from download_sorter.utils.logging_config import get_logger

logger = get_logger(__name__)


class SortingEventHandler(FileSystemEventHandler):
    """Turns watchdog events into dispatcher entries.

    Runs on the observer thread, so it only filters and enqueues.
    """

    def __init__(self, root: Path, dispatcher: EventDispatcher):
        """Initialize the event handler.

        Args:
            root: Watched root directory.
            dispatcher: Receives paths of newly arrived files.
        """
        super().__init__()
        self.root = Path(root)
        self._root_key = self._key(self.root)
        self.dispatcher = dispatcher

    @staticmethod
    def _key(path: Path) -> Path:
        try:
            return path.resolve()
        except OSError:
            return path.absolute()

    def _in_root(self, file_path: str) -> bool:
        """True if the file sits directly inside the watched root."""
        return self._key(Path(file_path).parent) == self._root_key

    def on_created(self, event) -> None:
        """Handle file creation events.

        Args:
            event: Filesystem event.
        """
        if not isinstance(event, FileCreatedEvent):
            return

        logger.debug(f"File created event: {event.src_path}")
        if self._in_root(event.src_path):
            self.dispatcher.put(Path(event.src_path))

    def on_moved(self, event) -> None:
        """Handle files renamed into the watched root.

        Browsers download to a temporary name and rename on completion;
        the final name only shows up as a move.

        Args:
            event: Filesystem event.
        """
        if not isinstance(event, FileMovedEvent):
            return

        logger.debug(f"File moved event: {event.src_path} -> {event.dest_path}")
        if self._in_root(event.dest_path):
            self.dispatcher.put(Path(event.dest_path))


class FileWatcherService:
    """Watches one directory and sorts files as they arrive.

    Manages the watchdog Observer and the dispatch thread. ``stop`` is
    synchronous: once it returns no further move is attempted.
    """

    def __init__(self, root: Path, mover: FileMover):
        """Initialize the watcher service.

        Args:
            root: Directory to watch (non-recursively).
            mover: Mover invoked for each arrival.
        """
        self.root = Path(root)
        self.mover = mover
        self.dispatcher = EventDispatcher(self._dispatch, name="SortDownloads-Watcher")
        self.handler = SortingEventHandler(self.root, self.dispatcher)
        self.observer: Optional[Observer] = None

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self.observer is not None and self.observer.is_alive()

    def _dispatch(self, path: Path) -> None:
        self.mover.move(path, MoveOrigin.WATCHER)

    def start(self) -> None:
        """Subscribe to the watched root.

        Raises:
            WatcherSubscriptionError: If the directory is missing or the
                observer cannot be started.
        """
        if self.observer is not None:
            logger.warning("Watcher already running")
            return

        if not self.root.is_dir():
            raise WatcherSubscriptionError(
                "Watched directory does not exist",
                directory=str(self.root)
            )

        observer = Observer()
        try:
            observer.schedule(self.handler, str(self.root), recursive=False)
            self.dispatcher.start()
            observer.start()
        except Exception as e:
            self.dispatcher.stop()
            raise WatcherSubscriptionError(
                f"Could not watch directory: {e}",
                directory=str(self.root),
                cause=e
            ) from e

        self.observer = observer
        logger.info(f"Watching directory: {self.root}")

    def stop(self) -> None:
        """Unsubscribe and wait for in-flight work to finish."""
        if self.observer is None:
            return

        self.observer.stop()
        self.observer.join()
        self.observer = None
        self.dispatcher.stop()

        stats = self.dispatcher.get_stats()
        logger.info(f"File watcher stopped: {stats.to_dict()}")
