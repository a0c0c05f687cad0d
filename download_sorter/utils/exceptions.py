"""
Custom Exceptions
=================

Defines custom exception classes for the Download Sorter.
All exceptions include error codes for programmatic handling.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Error codes for programmatic error handling."""

    # General errors (1000-1099)
    UNKNOWN_ERROR = 1000
    CONFIGURATION_ERROR = 1001
    FILE_NOT_FOUND = 1002
    PERMISSION_DENIED = 1003
    CONFIG_PARSE_ERROR = 1004

    # Move errors (1100-1199)
    MOVE_FAILED = 1100

    # Watcher errors (1200-1299)
    WATCHER_START_FAILED = 1200


class SorterError(Exception):
    """Base exception for all Download Sorter errors.

    Attributes:
        message: Human-readable error message.
        error_code: Programmatic error code.
        details: Additional error context.
        cause: Original exception that caused this error.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[dict] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Programmatic error code.
            details: Additional context as key-value pairs.
            cause: Original exception if wrapping another error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """Return a formatted error string."""
        result = f"[{self.error_code.name}] {self.message}"
        if self.details:
            result += f" | Details: {self.details}"
        if self.cause:
            result += f" | Caused by: {type(self.cause).__name__}: {self.cause}"
        return result

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(SorterError):
    """Raised when there's a configuration problem.

    Examples:
        - Settings file is not valid YAML
        - Invalid configuration values
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type
        super().__init__(
            message,
            error_code=error_code,
            details=details,
            **kwargs
        )


class ConfigParseError(ConfigurationError):
    """Raised when the rules file exists but cannot be parsed.

    The rule table is left exactly as it was before the load attempt.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if file_path:
            details["file_path"] = file_path
        super().__init__(
            message,
            error_code=ErrorCode.CONFIG_PARSE_ERROR,
            details=details,
            **kwargs
        )


class MoveError(SorterError):
    """Raised when a single file cannot be moved.

    Examples:
        - Permission denied
        - File is in use by another process
        - Source vanished between listing and move

    Never escapes the mover; it is turned into a failed MoveResult.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        destination: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.MOVE_FAILED,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if file_path:
            details["file_path"] = file_path
        if destination:
            details["destination"] = destination
        super().__init__(
            message,
            error_code=error_code,
            details=details,
            **kwargs
        )


class WatcherSubscriptionError(SorterError):
    """Raised when the filesystem notification subscription cannot start.

    Examples:
        - Watched directory does not exist
        - Observer thread failed to start
    """

    def __init__(
        self,
        message: str,
        directory: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if directory:
            details["directory"] = directory
        super().__init__(
            message,
            error_code=ErrorCode.WATCHER_START_FAILED,
            details=details,
            **kwargs
        )
