"""
Rule Table
==========

Thread-safe extension to destination-folder mapping with JSON persistence.
Read on every move, written rarely from settings edits and config loads.
"""

import json
import threading
from pathlib import Path
from typing import Dict, Mapping, Optional

from download_sorter.config.categories import DEFAULT_RULES, normalize_extension
from download_sorter.utils.exceptions import ConfigParseError
from download_sorter.utils.logging_config import get_logger

logger = get_logger(__name__)


class RuleTable:
    """Holds extension -> folder rules.

    Keys are lowercase dotted extensions (``".pdf"``). Values are folder
    names relative to the watched root. A blank folder in ``set`` deletes
    the rule instead of storing it.
    """

    def __init__(self, rules: Optional[Mapping[str, str]] = None):
        """Initialize the table.

        Args:
            rules: Initial rules. Uses the built-in defaults when None.
        """
        self._lock = threading.RLock()
        self._rules: Dict[str, str] = {}
        self.set(DEFAULT_RULES if rules is None else rules)

    def get(self) -> Dict[str, str]:
        """Return a copy of the current rules."""
        with self._lock:
            return dict(self._rules)

    def lookup(self, extension: str) -> Optional[str]:
        """Return the destination folder for an extension, if any."""
        key = (extension or "").lower()
        if not key:
            return None
        with self._lock:
            return self._rules.get(key)

    def set(self, new_rules: Mapping[str, Optional[str]]) -> None:
        """Merge rules into the table.

        Each entry is applied on its own: a blank or None folder removes
        that extension, anything else inserts or overwrites it. Entries
        not mentioned are left alone.

        Args:
            new_rules: Mapping of extension to folder name.
        """
        with self._lock:
            for raw_ext, raw_folder in new_rules.items():
                ext = normalize_extension(raw_ext)
                if not ext:
                    logger.warning(f"Ignoring rule with empty extension: {raw_ext!r}")
                    continue

                folder = (raw_folder or "").strip()
                if not folder:
                    if self._rules.pop(ext, None) is not None:
                        logger.debug(f"Removed rule: {ext}")
                    continue

                self._rules[ext] = folder

    def clear(self) -> None:
        """Remove every rule."""
        with self._lock:
            self._rules.clear()

    def load(self, path: Path) -> bool:
        """Merge rules from a JSON file.

        Args:
            path: JSON document mapping extension to folder.

        Returns:
            True if the file was found and applied, False if it is absent.

        Raises:
            ConfigParseError: If the file exists but is malformed.
        """
        path = Path(path)
        if not path.exists():
            logger.debug(f"Rules file not found, keeping current rules: {path}")
            return False

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigParseError(
                f"Rules file is not valid JSON: {e}",
                file_path=str(path),
                cause=e
            ) from e
        except OSError as e:
            raise ConfigParseError(
                f"Rules file could not be read: {e}",
                file_path=str(path),
                cause=e
            ) from e

        if not isinstance(data, dict):
            raise ConfigParseError(
                "Rules file must contain a JSON object",
                file_path=str(path),
                expected_type="object"
            )

        # Validate everything before touching the table.
        for ext, folder in data.items():
            if folder is not None and not isinstance(folder, str):
                raise ConfigParseError(
                    f"Folder for '{ext}' must be a string",
                    file_path=str(path),
                    config_key=ext,
                    expected_type="string"
                )

        self.set(data)
        logger.info(f"Loaded {len(data)} rule(s) from {path}")
        return True

    def save(self, path: Path) -> Path:
        """Write the full table as indented JSON.

        The document is written to a sibling ``.tmp`` file and then
        swapped in, so an interrupted save leaves the previous file intact.

        Args:
            path: Destination file; parent directories are created.

        Returns:
            The path written.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")

        with self._lock:
            rules = self.get()
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(rules, f, indent=2, sort_keys=True, ensure_ascii=False)
                    f.write("\n")
                tmp_path.replace(path)
            except BaseException:
                tmp_path.unlink(missing_ok=True)
                raise

        logger.info(f"Saved {len(rules)} rule(s) to {path}")
        return path

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    def __contains__(self, extension: str) -> bool:
        return self.lookup(extension) is not None
