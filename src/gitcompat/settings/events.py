"""
Event table management settings for git-compat-patch.
"""

import logging

from .base import SettingsSection
from .types import EventLayout

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_CAPACITY = 1000
DEFAULT_WARNING_THRESHOLD = 0.8


class EventSettings(SettingsSection):
    """Manages how map event tables are rewritten."""

    @property
    def manage(self) -> bool:
        """Check if event tables are rewritten at all."""
        return self._get_bool("events/manage", True)

    @manage.setter
    def manage(self, value: bool) -> None:
        """Set whether event tables are rewritten."""
        self._set("events/manage", value)

    @property
    def layout(self) -> EventLayout:
        """Get the event table layout."""
        raw = self._get_str("events/layout", EventLayout.GRID.value)
        try:
            return EventLayout(raw.lower())
        except ValueError:
            logger.warning(f"Invalid event layout: {raw}, using {EventLayout.GRID.value}")
            return EventLayout.GRID

    @layout.setter
    def layout(self, value: EventLayout) -> None:
        """Set the event table layout."""
        self._set("events/layout", value.value)

    @property
    def max_users(self) -> int:
        """Get the number of author streams in the partitioned layout."""
        return self._get_int("events/max_users", 1)

    @max_users.setter
    def max_users(self, value: int) -> None:
        """Set the number of author streams."""
        if value >= 1:
            self._set("events/max_users", value)
        else:
            logger.warning(f"Invalid max users: {value}, keeping current: {self.max_users}")

    @property
    def buffer_capacity(self) -> int:
        """Get the size of the grid region in the partitioned layout."""
        return self._get_int("events/buffer_capacity", DEFAULT_BUFFER_CAPACITY)

    @buffer_capacity.setter
    def buffer_capacity(self, value: int) -> None:
        """Set the size of the grid region."""
        if value >= 1:
            self._set("events/buffer_capacity", value)
        else:
            logger.warning(
                f"Invalid buffer capacity: {value}, keeping current: {self.buffer_capacity}"
            )

    @property
    def warning_threshold(self) -> float:
        """Get the grid occupancy fraction above which a map is flagged."""
        value = self._get_float("events/warning_threshold", DEFAULT_WARNING_THRESHOLD)
        if not 0.0 < value <= 1.0:
            logger.warning(
                f"Invalid warning threshold: {value}, using {DEFAULT_WARNING_THRESHOLD}"
            )
            return DEFAULT_WARNING_THRESHOLD
        return value

    @warning_threshold.setter
    def warning_threshold(self, value: float) -> None:
        """Set the grid occupancy warning fraction."""
        self._set("events/warning_threshold", value)
