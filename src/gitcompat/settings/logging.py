"""
Logging-related settings for git-compat-patch.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .base import SettingsSection

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)

# Log file location, relative to the project root
LOG_FILE_PATH = "logs/gitcompat.csv"

VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(SettingsSection):
    """Manages logging-related settings."""

    def __init__(self, settings: "QSettings", project_root: Path):
        super().__init__(settings)
        self.project_root = project_root

    # === CONSOLE LOGGING SETTINGS ===

    @property
    def console_log_level(self) -> str:
        """Get console logging level (DEBUG when debug output is on)."""
        if self.debug:
            return "DEBUG"
        return self._get_str("logging/console_level", "INFO")

    @console_log_level.setter
    def console_log_level(self, value: str) -> None:
        """Set console logging level."""
        if value.upper() in VALID_LEVELS:
            self._set("logging/console_level", value.upper())
        else:
            logger.warning(
                f"Invalid console log level: {value}, keeping current: {self.console_log_level}"
            )

    @property
    def console_use_colors(self) -> bool:
        """Check if console should use colors."""
        return self._get_bool("logging/console_use_colors", True)

    @console_use_colors.setter
    def console_use_colors(self, value: bool) -> None:
        """Set console color usage."""
        self._set("logging/console_use_colors", value)

    @property
    def debug(self) -> bool:
        """Check if debug messages are printed."""
        return self._get_bool("logging/debug", False)

    @debug.setter
    def debug(self, value: bool) -> None:
        """Set debug message output."""
        self._set("logging/debug", value)

    # === FILE LOGGING SETTINGS ===

    @property
    def file_logging(self) -> bool:
        """Check if file logging is enabled."""
        return self._get_bool("logging/file_enabled", False)

    @file_logging.setter
    def file_logging(self, value: bool) -> None:
        """Set file logging enabled state."""
        self._set("logging/file_enabled", value)

    @property
    def log_file_path(self) -> Path:
        """Get log file path (read-only, always under the project root)."""
        return self.project_root / LOG_FILE_PATH
