"""
Configuration type definitions for git-compat-patch.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from ..errors import ConfigError


class EventLayout(Enum):
    """How map event tables are laid out on disk."""
    GRID = "grid"
    PARTITIONED = "partitioned"


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str]
    warnings: List[str]


__all__ = ["ConfigError", "EventLayout", "ValidationResult"]
