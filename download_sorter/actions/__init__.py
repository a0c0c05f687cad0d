"""Actions module for rule lookup and file moves."""

from .rule_table import RuleTable
from .file_operations import FileMover, MoveOrigin, MoveResult, MoveStatus
from .scanner import DirectoryScanner, ScanSummary

__all__ = [
    "RuleTable",
    "FileMover",
    "MoveOrigin",
    "MoveResult",
    "MoveStatus",
    "DirectoryScanner",
    "ScanSummary",
]
