"""
Event Dispatcher
================

Single-threaded consumer of file arrival events.
The watchdog handler only enqueues paths; this loop performs the moves so
that stopping the watcher can join one thread and know no move follows.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from queue import Queue
from typing import Callable, Dict, Optional

from download_sorter.utils.logging_config import get_logger, set_correlation_id

logger = get_logger(__name__)

# Wakes the loop so it can notice the stop flag.
_STOP = object()


@dataclass
class DispatchStats:
    """Counters for the dispatch loop."""

    received: int = 0
    dispatched: int = 0
    dropped: int = 0
    errors: int = 0

    def to_dict(self) -> Dict:
        """Convert stats to dictionary."""
        return {
            "received": self.received,
            "dispatched": self.dispatched,
            "dropped": self.dropped,
            "errors": self.errors,
        }


class EventDispatcher:
    """Runs a callback for each queued path on one worker thread.

    Paths still queued when ``stop`` is called are dropped.
    """

    def __init__(self, callback: Callable[[Path], object], name: str = "EventDispatcher"):
        """Initialize the dispatcher.

        Args:
            callback: Invoked with each path, in arrival order.
            name: Worker thread name.
        """
        self.queue: "Queue[object]" = Queue()
        self.callback = callback
        self.name = name

        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.stats = DispatchStats()
        self._stats_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def put(self, path: Path) -> None:
        """Queue a path for dispatch."""
        if self._stopping.is_set():
            return
        with self._stats_lock:
            self.stats.received += 1
        self.queue.put(Path(path))
        logger.debug(f"Queued: {path}")

    def start(self) -> None:
        """Start the worker thread."""
        if self.is_running:
            logger.warning("Dispatcher already running")
            return

        self._stopping.clear()
        self._thread = threading.Thread(target=self._process_loop, daemon=True, name=self.name)
        self._thread.start()

    def stop(self) -> None:
        """Stop the worker and wait for any in-flight callback to finish."""
        if self._thread is None:
            return

        self._stopping.set()
        self.queue.put(_STOP)
        if self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

        # Discard anything that arrived after the sentinel.
        while not self.queue.empty():
            item = self.queue.get_nowait()
            if item is not _STOP:
                with self._stats_lock:
                    self.stats.dropped += 1

    def _process_loop(self) -> None:
        """Main loop: pop a path, run the callback, repeat until stopped."""
        set_correlation_id("watcher")
        while True:
            item = self.queue.get()
            if item is _STOP or self._stopping.is_set():
                if item is not _STOP:
                    with self._stats_lock:
                        self.stats.dropped += 1
                break

            try:
                self.callback(item)
                with self._stats_lock:
                    self.stats.dispatched += 1
            except Exception as e:
                # A bad event must not kill the loop.
                with self._stats_lock:
                    self.stats.errors += 1
                logger.error(f"Error dispatching {item}: {e}", exc_info=True)

    def get_stats(self) -> DispatchStats:
        """Get a copy of the current statistics."""
        with self._stats_lock:
            return DispatchStats(**self.stats.to_dict())
