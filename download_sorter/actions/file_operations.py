"""
File Operations
===============

Moves a single file into its category folder.
Handles destination name collisions and records every attempt in the
activity log. Per-file problems are returned as results, never raised.
"""

import errno
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from download_sorter.actions.rule_table import RuleTable
from download_sorter.config.categories import file_extension
from download_sorter.utils.exceptions import ErrorCode, MoveError
from download_sorter.utils.logging_config import ActivityLog, get_logger

logger = get_logger(__name__)


class MoveStatus(Enum):
    """Outcome of a single move attempt."""

    MOVED = "moved"
    NOT_MATCHED = "not_matched"
    SKIPPED = "skipped"  # Source vanished or already in place
    FAILED = "failed"


class MoveOrigin(Enum):
    """Which execution path asked for the move."""

    SCAN = "scan"
    WATCHER = "watcher"


@dataclass(frozen=True)
class MoveResult:
    """Result of trying to move one file.

    Attributes:
        source: File that was considered.
        status: What happened.
        destination: Final path when moved, intended path when failed.
        error: Error message for failed moves.
    """

    source: Path
    status: MoveStatus
    destination: Optional[Path] = None
    error: Optional[str] = None

    @property
    def moved(self) -> bool:
        return self.status is MoveStatus.MOVED


class FileMover:
    """Relocates files from the watched root into rule-defined folders.

    The same instance is shared by the scanner and the watcher so both
    paths behave identically.
    """

    def __init__(self, root: Path, rules: RuleTable, activity_log: ActivityLog):
        """Initialize the mover.

        Args:
            root: Watched root; destination folders are created inside it.
            rules: Rule table consulted for every file.
            activity_log: User-facing log receiving one line per attempt.
        """
        self.root = Path(root)
        self.rules = rules
        self.activity_log = activity_log

    def move(self, source: Path, origin: MoveOrigin = MoveOrigin.SCAN) -> MoveResult:
        """Move one file according to the rules.

        Args:
            source: File directly inside the watched root.
            origin: Execution path, used to label the log line.

        Returns:
            MoveResult describing the outcome.
        """
        source = Path(source)
        folder = self.rules.lookup(file_extension(source))
        if folder is None:
            return MoveResult(source, MoveStatus.NOT_MATCHED)

        # Events can race with the producing app deleting or renaming the file.
        if not source.is_file():
            logger.debug(f"Source no longer exists, skipping: {source}")
            return MoveResult(source, MoveStatus.SKIPPED)

        dest_dir = self.root / folder
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            dest_path = dest_dir / source.name

            if self._same_file(source, dest_path):
                logger.debug(f"Already in place: {source}")
                return MoveResult(source, MoveStatus.SKIPPED, destination=dest_path)

            dest_path = self._resolve_conflict(dest_path)
            self._relocate(source, dest_path)

        except MoveError as e:
            return self._failed(source, e, origin)
        except OSError as e:
            return self._failed(source, self._wrap(e, source, dest_dir), origin)

        prefix = "Watcher moved" if origin is MoveOrigin.WATCHER else "Moved"
        self.activity_log.write(f"{prefix} '{source}' to '{dest_path}'")
        logger.info(
            f"Moved: {source.name} -> {dest_path}",
            extra={"file_path": str(source), "destination": str(dest_path)}
        )
        return MoveResult(source, MoveStatus.MOVED, destination=dest_path)

    def _relocate(self, source: Path, dest_path: Path) -> None:
        """Rename within a volume, copy and delete across volumes."""
        try:
            shutil.move(str(source), str(dest_path))
        except OSError as e:
            raise self._wrap(e, source, dest_path) from e

    def _resolve_conflict(self, dest_path: Path) -> Path:
        """Resolve filename conflict by appending ' (n)' before the suffix.

        The filesystem is re-checked for every candidate; there is no
        upper bound on n.

        Args:
            dest_path: Desired destination path.

        Returns:
            Available path (may have counter suffix).
        """
        if not dest_path.exists():
            return dest_path

        stem = dest_path.stem
        suffix = dest_path.suffix
        parent = dest_path.parent

        counter = 1
        while True:
            candidate = parent / f"{stem} ({counter}){suffix}"
            if not candidate.exists():
                return candidate
            counter += 1

    @staticmethod
    def _same_file(source: Path, dest_path: Path) -> bool:
        """True when the destination is the source's own location."""
        try:
            return source.resolve() == dest_path.resolve()
        except OSError:
            return False

    @staticmethod
    def _wrap(error: OSError, source: Path, destination: Path) -> MoveError:
        if isinstance(error, PermissionError):
            code = ErrorCode.PERMISSION_DENIED
        elif isinstance(error, FileNotFoundError) or error.errno == errno.ENOENT:
            code = ErrorCode.FILE_NOT_FOUND
        else:
            code = ErrorCode.MOVE_FAILED
        return MoveError(
            error.strerror or str(error),
            file_path=str(source),
            destination=str(destination),
            error_code=code,
            cause=error
        )

    def _failed(self, source: Path, error: MoveError, origin: MoveOrigin) -> MoveResult:
        prefix = "Watcher error moving" if origin is MoveOrigin.WATCHER else "Error moving"
        self.activity_log.write(f"{prefix} '{source}': {error.message}")
        logger.warning(f"Failed to move {source.name}: {error}", extra={"file_path": str(source)})
        destination = error.details.get("destination")
        return MoveResult(
            source,
            MoveStatus.FAILED,
            destination=Path(destination) if destination else None,
            error=error.message
        )
