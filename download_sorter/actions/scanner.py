"""One-shot pass over the watched root."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from download_sorter.actions.file_operations import FileMover, MoveOrigin, MoveResult, MoveStatus
from download_sorter.utils.logging_config import Timer, get_logger

logger = get_logger(__name__)


@dataclass
class ScanSummary:
    """Per-file results of one scan."""

    results: List[MoveResult] = field(default_factory=list)

    def _count(self, status: MoveStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def moved(self) -> int:
        return self._count(MoveStatus.MOVED)

    @property
    def failed(self) -> int:
        return self._count(MoveStatus.FAILED)

    @property
    def unmatched(self) -> int:
        return self._count(MoveStatus.NOT_MATCHED)

    @property
    def skipped(self) -> int:
        return self._count(MoveStatus.SKIPPED)


class DirectoryScanner:
    """Feeds every file directly inside the root to the mover.

    The directory is listed once, before any move, so folders created
    during the pass are never revisited.
    """

    def __init__(self, root: Path, mover: FileMover):
        self.root = Path(root)
        self.mover = mover

    def list_files(self) -> List[Path]:
        """Return the immediate regular files of the root, sorted by name."""
        return sorted(
            (p for p in self.root.iterdir() if p.is_file()),
            key=lambda p: p.name
        )

    def scan(self) -> ScanSummary:
        """Move every matching file once.

        Returns:
            ScanSummary with one result per listed file.
        """
        summary = ScanSummary()
        with Timer(logger, "scan"):
            for path in self.list_files():
                summary.results.append(self.mover.move(path, MoveOrigin.SCAN))

        logger.info(
            f"Scan of {self.root}: {summary.moved} moved, {summary.failed} failed, "
            f"{summary.unmatched} unmatched, {summary.skipped} skipped"
        )
        return summary
