"""
Configuration Management System
===============================

Provides dataclass-based configuration with YAML file loading support.
Every path defaults to the platform-standard per-user location.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Any, Dict
import yaml

from platformdirs import user_config_dir, user_downloads_dir, user_log_dir

from download_sorter.utils.exceptions import ConfigurationError
from download_sorter.utils.logging_config import APP_NAME, LoggingConfig, get_logger

logger = get_logger(__name__)

RULES_FILE_NAME = "sortdownloads_rules.json"
ACTIVITY_LOG_NAME = "sortdownloads.log"
SETTINGS_FILE_NAME = "settings.yaml"


def default_config_dir() -> Path:
    """Per-user directory holding the rules and settings files."""
    return Path(user_config_dir(APP_NAME, appauthor=False, roaming=True))


def default_log_dir() -> Path:
    """Per-user directory holding the activity log."""
    return Path(user_log_dir(APP_NAME, appauthor=False))


def _as_path(value: Any, key: str) -> Path:
    if not isinstance(value, (str, Path)) or not str(value).strip():
        raise ConfigurationError(
            f"Invalid path for '{key}': {value!r}",
            config_key=key,
            expected_type="path"
        )
    return Path(value).expanduser()


@dataclass
class WatcherConfig:
    """Filesystem watcher configuration.

    Attributes:
        watch_directory: The watched root whose immediate files are sorted.
    """
    watch_directory: Path = field(default_factory=lambda: Path(user_downloads_dir()))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WatcherConfig":
        """Create WatcherConfig from dictionary."""
        if not data or "watch_directory" not in data:
            return cls()
        return cls(watch_directory=_as_path(data["watch_directory"], "watcher.watch_directory"))


@dataclass
class StorageConfig:
    """Where rules and the activity log are kept.

    Attributes:
        rules_file: JSON document with the extension to folder rules.
        activity_log: Append-only log of sort events.
    """
    rules_file: Path = field(default_factory=lambda: default_config_dir() / RULES_FILE_NAME)
    activity_log: Path = field(default_factory=lambda: default_log_dir() / ACTIVITY_LOG_NAME)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageConfig":
        """Create StorageConfig from dictionary."""
        if not data:
            return cls()
        defaults = cls()
        return cls(
            rules_file=_as_path(data["rules_file"], "storage.rules_file")
            if "rules_file" in data else defaults.rules_file,
            activity_log=_as_path(data["activity_log"], "storage.activity_log")
            if "activity_log" in data else defaults.activity_log,
        )


@dataclass
class SorterConfig:
    """Main configuration container.

    Aggregates all configuration sections and provides loading from YAML.
    """
    watcher: WatcherConfig = field(default_factory=WatcherConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def for_directory(cls, root: Path, state_dir: Optional[Path] = None) -> "SorterConfig":
        """Build a config that keeps everything next to a given watched root.

        Args:
            root: Directory to sort.
            state_dir: Where rules and logs go (default: ``root/.sortdownloads``).
        """
        root = Path(root)
        state_dir = Path(state_dir) if state_dir else root / ".sortdownloads"
        return cls(
            watcher=WatcherConfig(watch_directory=root),
            storage=StorageConfig(
                rules_file=state_dir / RULES_FILE_NAME,
                activity_log=state_dir / ACTIVITY_LOG_NAME,
            ),
            logging=LoggingConfig(log_dir=state_dir, file_output=False),
        )

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "SorterConfig":
        """Load configuration from YAML file.

        Args:
            config_path: Path to the settings file. If None, looks for
                        settings.yaml in the per-user config directory.

        Returns:
            SorterConfig instance with loaded settings.

        Raises:
            ConfigurationError: If the file is not valid YAML or not a mapping.
        """
        if config_path is None:
            config_path = default_config_dir() / SETTINGS_FILE_NAME
        config_path = Path(config_path)

        if not config_path.exists():
            logger.debug(f"Settings file not found at {config_path}, using defaults")
            return cls()

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse settings file: {e}")
            raise ConfigurationError(
                f"Settings file is not valid YAML: {config_path}",
                cause=e
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Settings file must contain a mapping: {config_path}",
                expected_type="mapping"
            )

        logger.info(f"Loaded settings from {config_path}")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "SorterConfig":
        """Create SorterConfig from dictionary."""
        return cls(
            watcher=WatcherConfig.from_dict(data.get("watcher") or {}),
            storage=StorageConfig.from_dict(data.get("storage") or {}),
            logging=LoggingConfig.from_dict(data.get("logging") or {}),
        )

    def save(self, config_path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path where to save the configuration.
        """
        data = {
            "watcher": {
                "watch_directory": str(self.watcher.watch_directory),
            },
            "storage": {
                "rules_file": str(self.storage.rules_file),
                "activity_log": str(self.storage.activity_log),
            },
            "logging": {
                "level": self.logging.level,
                "log_dir": str(self.logging.log_dir),
                "console_output": self.logging.console_output,
                "file_output": self.logging.file_output,
                "json_format": self.logging.json_format,
                "max_file_size": self.logging.max_file_size,
                "backup_count": self.logging.backup_count,
            },
        }

        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved settings to {config_path}")
