"""Utilities module for Download Sorter."""

from .logging_config import (
    setup_logging,
    get_logger,
    LoggingConfig,
    ActivityLog,
    Timer,
)
from .exceptions import (
    ErrorCode,
    SorterError,
    ConfigurationError,
    ConfigParseError,
    MoveError,
    WatcherSubscriptionError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "LoggingConfig",
    "ActivityLog",
    "Timer",
    "ErrorCode",
    "SorterError",
    "ConfigurationError",
    "ConfigParseError",
    "MoveError",
    "WatcherSubscriptionError",
]
