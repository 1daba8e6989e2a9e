"""
Core settings management for git-compat-patch.
"""

import logging
from pathlib import Path
from typing import List, Union

from PySide6.QtCore import QSettings

from ..documents.models import DATA_DIR_NAME
from .types import EventLayout, ValidationResult
from .validation import SettingsValidator
from .format import FormatSettings
from .events import EventSettings
from .logging import LoggingSettings

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "gitcompat.ini"


class ProjectSettings:
    """
    Per-project configuration stored in an INI file at the project root.

    The file is meant to be committed, so every author runs with the same
    layout settings. Per-author state lives in separate files, see
    ``settings.authors``.
    """

    def __init__(self, project_root: Union[str, Path]):
        """Open (or create on first write) the settings of a project.

        Args:
            project_root: Project directory, the one holding ``data/``
        """
        self.project_root = Path(project_root)
        self.settings = QSettings(
            str(self.project_root / SETTINGS_FILENAME), QSettings.Format.IniFormat
        )

        # Initialize subsystems
        self._validator = SettingsValidator(self)
        self._format = FormatSettings(self.settings)
        self._events = EventSettings(self.settings)
        self._logging = LoggingSettings(self.settings, self.project_root)

        logger.debug(f"Settings loaded from: {self.settings.fileName()}")

    # === SUBSYSTEM ACCESS ===

    @property
    def format(self) -> FormatSettings:
        """Access formatting settings subsystem."""
        return self._format

    @property
    def events(self) -> EventSettings:
        """Access event table settings subsystem."""
        return self._events

    @property
    def logging(self) -> LoggingSettings:
        """Access logging settings subsystem."""
        return self._logging

    # === PATHS ===

    @property
    def data_path(self) -> Path:
        """Get the project's data directory."""
        return self.project_root / DATA_DIR_NAME

    @property
    def format_root(self) -> Path:
        """Get the directory the formatting pass scans."""
        return self.project_root if self._format.format_all else self.data_path

    # === FORMAT SETTINGS (DELEGATED) ===

    @property
    def format_all(self) -> bool:
        """Check if the whole project tree is formatted."""
        return self._format.format_all

    @property
    def redact(self) -> bool:
        """Check if per-user editor state is reset."""
        return self._format.redact

    @property
    def excluded_directories(self) -> List[str]:
        """Get directory names skipped while scanning."""
        return self._format.excluded_directories

    # === EVENT SETTINGS (DELEGATED) ===

    @property
    def manage_events(self) -> bool:
        """Check if event tables are rewritten."""
        return self._events.manage

    @property
    def event_layout(self) -> EventLayout:
        """Get the event table layout."""
        return self._events.layout

    @property
    def max_users(self) -> int:
        """Get the number of author streams."""
        return self._events.max_users

    @property
    def buffer_capacity(self) -> int:
        """Get the size of the grid region in the partitioned layout."""
        return self._events.buffer_capacity

    @property
    def warning_threshold(self) -> float:
        """Get the grid occupancy warning fraction."""
        return self._events.warning_threshold

    # === LOGGING SETTINGS (DELEGATED) ===

    @property
    def console_log_level(self) -> str:
        """Get console logging level."""
        return self._logging.console_log_level

    @property
    def console_use_colors(self) -> bool:
        """Check if console should use colors."""
        return self._logging.console_use_colors

    @property
    def file_logging(self) -> bool:
        """Check if file logging is enabled."""
        return self._logging.file_logging

    @property
    def log_file_path(self) -> Path:
        """Get log file path."""
        return self._logging.log_file_path

    # === VALIDATION ===

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        return self._validator.validate()

    # === UTILITY METHODS ===

    def get_settings_file_path(self) -> str:
        """Get the file path where settings are stored."""
        return self.settings.fileName()

    def sync(self) -> None:
        """Force synchronization of settings to storage."""
        self.settings.sync()
