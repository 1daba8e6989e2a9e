"""
Document formatting settings for git-compat-patch.
"""

import logging
from typing import List

import orjson

from .base import SettingsSection

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED = [".git"]


class FormatSettings(SettingsSection):
    """Manages which documents are formatted and how."""

    @property
    def format_all(self) -> bool:
        """Check if documents outside the data directory are formatted too."""
        return self._get_bool("format/format_all", False)

    @format_all.setter
    def format_all(self, value: bool) -> None:
        """Set whether the whole project tree is formatted."""
        self._set("format/format_all", value)

    @property
    def redact(self) -> bool:
        """Check if per-user editor state is reset in written documents."""
        return self._get_bool("format/redact", True)

    @redact.setter
    def redact(self, value: bool) -> None:
        """Set per-user editor state redaction."""
        self._set("format/redact", value)

    @property
    def excluded_directories(self) -> List[str]:
        """Get directory names skipped while scanning.

        Stored as a JSON array. A value that does not parse is reported and
        the default list is used instead.
        """
        value = self.settings.value("format/exclude", "")
        # Unquoted INI values containing commas come back split into a list
        raw = ",".join(str(item) for item in value) if isinstance(value, list) else str(value or "")
        if not raw:
            return list(DEFAULT_EXCLUDED)

        try:
            parsed = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            logger.warning(f"Invalid exclusion list {raw!r} ({e}), using {DEFAULT_EXCLUDED}")
            return list(DEFAULT_EXCLUDED)

        if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
            logger.warning(
                f"Exclusion list must be an array of names, got {raw!r}, using {DEFAULT_EXCLUDED}"
            )
            return list(DEFAULT_EXCLUDED)

        # .git is never formatted
        return list(dict.fromkeys(DEFAULT_EXCLUDED + parsed))

    @excluded_directories.setter
    def excluded_directories(self, value: List[str]) -> None:
        """Set directory names skipped while scanning."""
        self._set("format/exclude", orjson.dumps(value).decode("utf-8"))
