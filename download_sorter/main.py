"""
Download Sorter - Main Application
==================================

The sorting engine and its command-line entry point.
The engine owns the rule table, the activity log and at most one live
watcher; shells (tray apps, the CLI below) drive it through its public
methods only.
"""

import signal
import sys
import threading
import uuid
from pathlib import Path
from typing import Dict, Mapping, Optional

from download_sorter.actions import DirectoryScanner, FileMover, RuleTable, ScanSummary
from download_sorter.config import SorterConfig
from download_sorter.monitoring import FileWatcherService
from download_sorter.utils.exceptions import SorterError
from download_sorter.utils.logging_config import (
    ActivityLog,
    get_logger,
    set_correlation_id,
    setup_logging,
)

logger = get_logger(__name__)


class DownloadSorter:
    """Sorts files in the watched root into category folders.

    Both execution paths, ``run`` and the live watcher, use the same
    FileMover and therefore the same rules, naming and logging.
    """

    def __init__(self, config: Optional[SorterConfig] = None, rules: Optional[RuleTable] = None):
        """Initialize the engine.

        Args:
            config: Paths and logging settings. Uses per-user defaults if None.
            rules: Rule table to use. Starts from the built-in defaults if None.
        """
        self.config = config or SorterConfig()
        self.root = self.config.watcher.watch_directory
        self.rules = rules if rules is not None else RuleTable()
        self.activity_log = ActivityLog(self.config.storage.activity_log)
        self.mover = FileMover(self.root, self.rules, self.activity_log)

        self._watcher: Optional[FileWatcherService] = None
        self._watcher_lock = threading.Lock()

    @property
    def rules_file(self) -> Path:
        return self.config.storage.rules_file

    @property
    def log_file(self) -> Path:
        return self.config.storage.activity_log

    @property
    def is_watching(self) -> bool:
        """True while a watcher subscription is active."""
        return self._watcher is not None

    # =====================
    # Sorting
    # =====================

    def scan(self) -> ScanSummary:
        """Sort the watched root once and return per-file results."""
        set_correlation_id(f"scan-{uuid.uuid4().hex[:6]}")
        if not self.root.is_dir():
            logger.warning(f"Watched directory does not exist: {self.root}")
            return ScanSummary()

        self.activity_log.write("Starting manual sort")
        summary = DirectoryScanner(self.root, self.mover).scan()
        self.activity_log.write(f"Manual sort complete, {summary.moved} file(s) moved")
        return summary

    def run(self) -> int:
        """Sort the watched root once.

        Returns:
            Number of files actually moved.
        """
        return self.scan().moved

    def sort_now(self) -> int:
        """Run a sort and persist the rules, as the "Sort now" action does."""
        moved = self.run()
        self.save_rules_to_file()
        return moved

    # =====================
    # Watcher
    # =====================

    def start_watcher(self) -> None:
        """Start sorting files as they arrive. No-op if already active.

        Raises:
            WatcherSubscriptionError: If the subscription cannot be set up.
        """
        with self._watcher_lock:
            if self._watcher is not None:
                return

            watcher = FileWatcherService(self.root, self.mover)
            watcher.start()
            self._watcher = watcher
            self.activity_log.write("Watcher started")

    def stop_watcher(self) -> None:
        """Stop the watcher and wait until no move can follow. No-op if inactive."""
        with self._watcher_lock:
            if self._watcher is None:
                return

            self._watcher.stop()
            self._watcher = None
            self.activity_log.write("Watcher stopped")

    # =====================
    # Rules
    # =====================

    def get_rules(self) -> Dict[str, str]:
        """Return a copy of the current rules."""
        return self.rules.get()

    def set_rules(self, new_rules: Mapping[str, Optional[str]]) -> None:
        """Merge rules; a blank folder deletes that extension's rule."""
        self.rules.set(new_rules)

    def load_rules_from_file(self) -> bool:
        """Merge rules from the rules file.

        Returns:
            False if the file does not exist.

        Raises:
            ConfigParseError: If the file exists but is malformed.
        """
        return self.rules.load(self.rules_file)

    def save_rules_to_file(self) -> Path:
        """Write the current rules to the rules file."""
        return self.rules.save(self.rules_file)

    def close(self) -> None:
        """Stop the watcher and release the activity log."""
        self.stop_watcher()
        self.activity_log.close()


def main(argv=None):
    """Main entry point with CLI support."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Download Sorter - sort downloads into folders by file type"
    )
    parser.add_argument(
        '--once', '-o',
        action='store_true',
        help='Sort the watched folder once and exit'
    )
    parser.add_argument(
        '--rules', '-r',
        action='store_true',
        help='List the current rules'
    )
    parser.add_argument(
        '--set-rule',
        nargs=2,
        metavar=('EXT', 'FOLDER'),
        help='Add or change a rule (an empty FOLDER removes it)'
    )
    parser.add_argument(
        '--log', '-l',
        action='store_true',
        help='Print the activity log location'
    )
    parser.add_argument(
        '--config', '-c',
        type=Path,
        help='Settings file (YAML)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    sorter = None
    try:
        config = SorterConfig.load(args.config)
        if args.verbose:
            config.logging.level = "DEBUG"
        setup_logging(config.logging)

        sorter = DownloadSorter(config)

        if args.log:
            print(sorter.log_file)
            return 0

        sorter.load_rules_from_file()

        if args.set_rule:
            ext, folder = args.set_rule
            sorter.set_rules({ext: folder})
            sorter.save_rules_to_file()
            print(f"✓ Saved rules to {sorter.rules_file}")
            return 0

        if args.rules:
            rules = sorter.get_rules()
            print(f"\n📜 Rules ({len(rules)}):\n")
            for ext in sorted(rules):
                print(f"  {ext:10} → {rules[ext]}")
            return 0

        if args.once:
            moved = sorter.sort_now()
            print(f"✓ Moved {moved} file(s) and organized {sorter.root}")
            return 0

        # Default: watch until interrupted
        stop_event = threading.Event()

        def signal_handler(sig, frame):
            stop_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        sorter.start_watcher()
        logger.info(f"Sorting {sorter.root}. Press Ctrl+C to stop.")
        while not stop_event.wait(1.0):
            pass
        return 0

    except SorterError as e:
        logger.error(str(e))
        print(f"✗ {e.message}", file=sys.stderr)
        return 1
    finally:
        if sorter is not None:
            sorter.close()


if __name__ == "__main__":
    sys.exit(main())
