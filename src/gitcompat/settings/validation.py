"""
Settings validation system for git-compat-patch.
"""

import logging
from typing import List, TYPE_CHECKING

from .types import EventLayout, ValidationResult

if TYPE_CHECKING:
    from .core import ProjectSettings

logger = logging.getLogger(__name__)


class SettingsValidator:
    """Validates configuration settings."""

    def __init__(self, settings: "ProjectSettings"):
        self.settings = settings

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        errors: List[str] = []
        warnings: List[str] = []

        # Validate project layout
        if not self.settings.project_root.is_dir():
            errors.append(f"Project path does not exist: {self.settings.project_root}")
        elif not self.settings.data_path.is_dir():
            errors.append(
                f"Project has no data directory: {self.settings.data_path}"
            )

        # Validate event layout settings
        if self.settings.max_users < 1:
            errors.append(f"Max users must be at least 1, got {self.settings.max_users}")
        if self.settings.buffer_capacity < 1:
            errors.append(
                f"Buffer capacity must be at least 1, got {self.settings.buffer_capacity}"
            )
        if self.settings.event_layout == EventLayout.GRID and self.settings.max_users > 1:
            warnings.append(
                f"Max users is {self.settings.max_users} but the grid layout has no "
                "author streams; set events/layout=partitioned to use them"
            )
        if not self.settings.manage_events:
            warnings.append("Event table management is disabled")

        return ValidationResult(
            is_valid=len(errors) == 0, errors=errors, warnings=warnings
        )
