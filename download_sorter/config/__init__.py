"""Configuration module for Download Sorter."""

from .settings import (
    SorterConfig,
    WatcherConfig,
    StorageConfig,
)
from .categories import FileCategory, DEFAULT_RULES, file_extension, normalize_extension

__all__ = [
    "SorterConfig",
    "WatcherConfig",
    "StorageConfig",
    "FileCategory",
    "DEFAULT_RULES",
    "normalize_extension",
    "file_extension",
]
