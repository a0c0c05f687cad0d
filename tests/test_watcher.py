"""
Tests for live watching: event handler, dispatcher and engine lifecycle.
"""

import threading
import time
from pathlib import Path

import pytest
from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileMovedEvent

from download_sorter.config import SorterConfig
from download_sorter.main import DownloadSorter
from download_sorter.monitoring.queue_manager import EventDispatcher
from download_sorter.monitoring.watcher import FileWatcherService, SortingEventHandler
from download_sorter.utils.exceptions import ErrorCode, WatcherSubscriptionError


class RecordingDispatcher:
    """Stand-in dispatcher collecting queued paths."""

    def __init__(self):
        self.paths = []

    def put(self, path):
        self.paths.append(Path(path))


class TestSortingEventHandler:
    """Tests for SortingEventHandler filtering."""

    @pytest.fixture
    def dispatcher(self):
        return RecordingDispatcher()

    @pytest.fixture
    def handler(self, downloads, dispatcher):
        return SortingEventHandler(downloads, dispatcher)

    def test_created_file_queued(self, handler, dispatcher, downloads):
        """Test file creation in the root is queued."""
        handler.on_created(FileCreatedEvent(str(downloads / "a.pdf")))

        assert dispatcher.paths == [downloads / "a.pdf"]

    def test_directory_ignored(self, handler, dispatcher, downloads):
        """Test directory creation is ignored."""
        handler.on_created(DirCreatedEvent(str(downloads / "Images")))

        assert dispatcher.paths == []

    def test_nested_file_ignored(self, handler, dispatcher, downloads):
        """Test files inside category folders are ignored."""
        handler.on_created(FileCreatedEvent(str(downloads / "Images" / "a.png")))

        assert dispatcher.paths == []

    def test_rename_into_root_queued(self, handler, dispatcher, downloads):
        """Test a finished download renamed into place is queued."""
        handler.on_moved(FileMovedEvent(
            str(downloads / "a.pdf.crdownload"),
            str(downloads / "a.pdf")
        ))

        assert dispatcher.paths == [downloads / "a.pdf"]

    def test_rename_out_of_root_ignored(self, handler, dispatcher, downloads):
        """Test our own moves into category folders are ignored."""
        handler.on_moved(FileMovedEvent(
            str(downloads / "a.pdf"),
            str(downloads / "Documents" / "a.pdf")
        ))

        assert dispatcher.paths == []


class TestEventDispatcher:
    """Tests for EventDispatcher."""

    def test_dispatches_in_order(self, wait_for):
        """Test queued paths reach the callback in order."""
        seen = []
        dispatcher = EventDispatcher(seen.append)
        dispatcher.start()
        try:
            for name in ("a", "b", "c"):
                dispatcher.put(Path(name))
            assert wait_for(lambda: len(seen) == 3)
        finally:
            dispatcher.stop()

        assert seen == [Path("a"), Path("b"), Path("c")]
        assert dispatcher.get_stats().dispatched == 3

    def test_callback_error_keeps_loop_alive(self, wait_for):
        """Test an exception in one callback does not stop the loop."""
        seen = []

        def callback(path):
            if path.name == "boom":
                raise RuntimeError("boom")
            seen.append(path)

        dispatcher = EventDispatcher(callback)
        dispatcher.start()
        try:
            dispatcher.put(Path("boom"))
            dispatcher.put(Path("ok"))
            assert wait_for(lambda: seen == [Path("ok")])
        finally:
            dispatcher.stop()

        assert dispatcher.get_stats().errors == 1

    def test_stop_waits_for_callback_and_drops_pending(self):
        """Test stop joins the worker and no callback runs afterwards."""
        started = threading.Event()
        release = threading.Event()
        calls = []

        def callback(path):
            calls.append(path)
            started.set()
            release.wait(5)

        dispatcher = EventDispatcher(callback)
        dispatcher.start()
        dispatcher.put(Path("first"))
        assert started.wait(5)
        dispatcher.put(Path("second"))

        threading.Timer(0.2, release.set).start()
        dispatcher.stop()

        assert calls == [Path("first")]
        assert not dispatcher.is_running
        assert dispatcher.get_stats().dropped == 1

        time.sleep(0.2)
        assert calls == [Path("first")]

    def test_put_after_stop_ignored(self):
        """Test nothing is queued once stopped."""
        dispatcher = EventDispatcher(lambda path: None)
        dispatcher.start()
        dispatcher.stop()
        dispatcher.put(Path("late"))

        assert dispatcher.queue.empty()

    def test_stop_without_start(self):
        """Test stopping an idle dispatcher is a no-op."""
        EventDispatcher(lambda path: None).stop()


class TestFileWatcherService:
    """Tests for FileWatcherService subscription handling."""

    def test_missing_directory(self, sorter, tmp_path):
        """Test watching a missing directory fails loudly."""
        service = FileWatcherService(tmp_path / "missing", sorter.mover)

        with pytest.raises(WatcherSubscriptionError) as exc_info:
            service.start()

        assert exc_info.value.error_code == ErrorCode.WATCHER_START_FAILED
        assert not service.is_running

    def test_start_stop(self, sorter, downloads):
        """Test the observer runs between start and stop."""
        service = FileWatcherService(downloads, sorter.mover)
        service.start()
        try:
            assert service.is_running
        finally:
            service.stop()

        assert not service.is_running
        service.stop()


class TestWatcherLifecycle:
    """End-to-end watcher tests on the engine."""

    def test_new_file_sorted(self, sorter, downloads, wait_for, read_log):
        """Test a file dropped into the root is moved and logged."""
        sorter.start_watcher()
        try:
            (downloads / "photo.png").write_bytes(b"\x89PNG test")

            target = downloads / "Images" / "photo.png"
            assert wait_for(target.exists)
            assert wait_for(lambda: "Watcher moved" in read_log(sorter))
        finally:
            sorter.stop_watcher()

        assert not (downloads / "photo.png").exists()
        assert f"to '{downloads / 'Images' / 'photo.png'}'" in read_log(sorter)

    def test_no_moves_after_stop(self, sorter, downloads, read_log):
        """Test files arriving after stop are left alone and not logged."""
        sorter.start_watcher()
        sorter.stop_watcher()

        (downloads / "later.png").write_bytes(b"png")
        time.sleep(1.0)

        assert (downloads / "later.png").exists()
        assert not (downloads / "Images").exists()
        assert "later.png" not in read_log(sorter)

    def test_unmatched_arrival_untouched(self, sorter, downloads, wait_for):
        """Test arrivals without a rule stay put."""
        sorter.start_watcher()
        try:
            (downloads / "notes.xyz").write_text("x")
            (downloads / "song.mp3").write_bytes(b"mp3")
            assert wait_for((downloads / "Audio" / "song.mp3").exists)
        finally:
            sorter.stop_watcher()

        assert (downloads / "notes.xyz").exists()

    def test_start_is_idempotent(self, sorter, read_log):
        """Test a second start keeps the single active watcher."""
        sorter.start_watcher()
        try:
            first = sorter._watcher
            sorter.start_watcher()
            assert sorter._watcher is first
            assert sorter.is_watching
        finally:
            sorter.stop_watcher()

        assert read_log(sorter).count("Watcher started") == 1

    def test_stop_is_idempotent(self, sorter, read_log):
        """Test stopping while stopped is a no-op."""
        sorter.stop_watcher()
        sorter.start_watcher()
        sorter.stop_watcher()
        sorter.stop_watcher()

        assert not sorter.is_watching
        assert read_log(sorter).count("Watcher stopped") == 1

    def test_restart(self, sorter, downloads, wait_for):
        """Test the watcher can be started again after stopping."""
        sorter.start_watcher()
        sorter.stop_watcher()
        sorter.start_watcher()
        try:
            (downloads / "doc.pdf").write_bytes(b"pdf")
            assert wait_for((downloads / "Documents" / "doc.pdf").exists)
        finally:
            sorter.stop_watcher()

    def test_start_fails_for_missing_root(self, tmp_path):
        """Test the engine surfaces subscription failures."""
        config = SorterConfig.for_directory(tmp_path / "missing", state_dir=tmp_path / "state")
        engine = DownloadSorter(config)
        try:
            with pytest.raises(WatcherSubscriptionError):
                engine.start_watcher()
            assert not engine.is_watching
        finally:
            engine.close()

    def test_watcher_and_scan_share_rules(self, sorter, downloads, wait_for):
        """Test rule edits apply to the running watcher."""
        sorter.start_watcher()
        try:
            sorter.set_rules({".stl": "Models"})
            (downloads / "part.stl").write_bytes(b"solid")
            assert wait_for((downloads / "Models" / "part.stl").exists)
        finally:
            sorter.stop_watcher()
