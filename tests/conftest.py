"""Shared fixtures for Download Sorter tests."""

import time
from pathlib import Path

import pytest

from download_sorter.config import SorterConfig
from download_sorter.main import DownloadSorter


@pytest.fixture
def downloads(tmp_path):
    """Empty watched root."""
    root = tmp_path / "Downloads"
    root.mkdir()
    return root


@pytest.fixture
def config(tmp_path, downloads):
    """Config keeping rules and logs outside the watched root."""
    return SorterConfig.for_directory(downloads, state_dir=tmp_path / "state")


@pytest.fixture
def sorter(config):
    """Engine with the built-in rules."""
    engine = DownloadSorter(config)
    yield engine
    engine.close()


@pytest.fixture
def read_log():
    """Return a function reading an engine's activity log ('' if absent)."""
    def _read(engine: DownloadSorter) -> str:
        path = Path(engine.log_file)
        return path.read_text(encoding="utf-8") if path.exists() else ""
    return _read


@pytest.fixture
def wait_for():
    """Return a function polling a predicate until it holds or times out."""
    def _wait(predicate, timeout: float = 10.0, interval: float = 0.05) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()
    return _wait
