"""
Logging Configuration
=====================

Two kinds of logging live here:

- Diagnostic logging for developers: structured JSON or coloured console
  output with correlation IDs, configured through ``setup_logging``.
- The user-facing activity log: one timestamped line per sort event,
  appended to a fixed file and never rotated.
"""

import logging
import logging.handlers
import json
import sys
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
import threading

from platformdirs import user_log_dir

from download_sorter.utils.exceptions import ConfigurationError

APP_NAME = "SortDownloads"
ROOT_LOGGER_NAME = "download_sorter"
ACTIVITY_LOGGER_NAME = "download_sorter.activity"

# Thread-local storage for correlation IDs
_thread_local = threading.local()


def get_correlation_id() -> str:
    """Get the current correlation ID for the thread."""
    if not hasattr(_thread_local, 'correlation_id'):
        _thread_local.correlation_id = str(uuid.uuid4())[:8]
    return _thread_local.correlation_id


def set_correlation_id(correlation_id: str) -> None:
    """Set a correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": get_correlation_id(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        if hasattr(record, 'file_path'):
            log_data["file_path"] = record.file_path
        if hasattr(record, 'destination'):
            log_data["destination"] = record.destination
        if hasattr(record, 'operation'):
            log_data["operation"] = record.operation
        if hasattr(record, 'duration_ms'):
            log_data["duration_ms"] = record.duration_ms

        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """Human-readable colored console formatter."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        """Format with colors for console output."""
        color = self.COLORS.get(record.levelname, '')
        timestamp = datetime.now().strftime('%H:%M:%S')

        msg = f"{color}[{timestamp}] {record.levelname:8}{self.RESET} "
        msg += f"[{get_correlation_id()}] "
        msg += f"{record.name}: {record.getMessage()}"

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


def _as_level(value, key: str = "logging.level") -> str:
    level = str(value).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(
            f"Unknown log level for '{key}': {value!r}",
            config_key=key,
            expected_type="log level"
        )
    return level


def _as_int(value, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid integer for '{key}': {value!r}",
            config_key=key,
            expected_type="integer",
            cause=e
        ) from e


@dataclass
class LoggingConfig:
    """Configuration for the diagnostic logging system."""
    level: str = "INFO"
    log_dir: Path = field(default_factory=lambda: Path(user_log_dir(APP_NAME, appauthor=False)))
    console_output: bool = True
    file_output: bool = True
    json_format: bool = False  # Use JSON for console
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    @classmethod
    def from_dict(cls, data: dict) -> "LoggingConfig":
        """Create LoggingConfig from dictionary."""
        if not data:
            return cls()
        defaults = cls()
        log_dir = data.get("log_dir")
        return cls(
            level=_as_level(data.get("level", defaults.level)),
            log_dir=Path(log_dir).expanduser() if log_dir else defaults.log_dir,
            console_output=bool(data.get("console_output", defaults.console_output)),
            file_output=bool(data.get("file_output", defaults.file_output)),
            json_format=bool(data.get("json_format", defaults.json_format)),
            max_file_size=_as_int(data.get("max_file_size", defaults.max_file_size), "logging.max_file_size"),
            backup_count=_as_int(data.get("backup_count", defaults.backup_count), "logging.backup_count"),
        )


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """Set up the diagnostic logging system.

    Args:
        config: Logging configuration. Uses defaults if not provided.
    """
    if config is None:
        config = LoggingConfig()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(_as_level(config.level))

    # Remove existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if config.console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        if config.json_format:
            console_handler.setFormatter(JSONFormatter())
        else:
            console_handler.setFormatter(ConsoleFormatter())
        root_logger.addHandler(console_handler)

    if config.file_output:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = config.log_dir / "diagnostics.log"

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # Prevent propagation to root logger
    root_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Name of the module (typically __name__).

    Returns:
        Logger instance with the correct prefix.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class ActivityLog:
    """Append-only, timestamped activity log shown to the user.

    Each call to ``write`` produces exactly one line of the form
    ``yyyy-MM-dd HH:mm:ss <message>``. Writes go through a single
    ``FileHandler`` whose lock serializes concurrent scanner and
    watcher threads, so lines never interleave.
    """

    LINE_FORMAT = "%(asctime)s %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self, path: Path):
        """Open the activity log, creating its directory.

        Args:
            path: File the lines are appended to.
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Records go straight to the handler; no logger is registered.
        self._handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        self._handler.setFormatter(logging.Formatter(self.LINE_FORMAT, self.DATE_FORMAT))

    def write(self, message: str) -> None:
        """Append a single line to the log."""
        record = logging.LogRecord(
            ACTIVITY_LOGGER_NAME, logging.INFO, __file__, 0, message, None, None
        )
        self._handler.handle(record)

    def close(self) -> None:
        """Close the underlying file handler."""
        self._handler.close()


class Timer:
    """Context manager for timing operations and logging duration."""

    def __init__(self, logger: logging.Logger, operation: str):
        """Initialize timer.

        Args:
            logger: Logger to log the duration to.
            operation: Name of the operation being timed.
        """
        self.logger = logger
        self.operation = operation
        self.start_time = None

    def __enter__(self):
        """Start the timer."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop the timer and log the duration."""
        duration_ms = (time.perf_counter() - self.start_time) * 1000
        self.logger.info(
            f"Operation completed: {self.operation}",
            extra={"operation": self.operation, "duration_ms": round(duration_ms, 2)},
        )
        return False
