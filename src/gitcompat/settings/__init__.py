"""
Settings package for git-compat-patch.

This package provides type-safe access to the project configuration,
stored with Qt's QSettings in an INI file at the project root, and to the
per-author identity files kept next to it.

Usage:
    from gitcompat.settings import ProjectSettings

    settings = ProjectSettings("path/to/project")
    result = settings.validate()
"""

from .core import ProjectSettings
from .types import ConfigError, EventLayout, ValidationResult
from .authors import (
    AuthorContext,
    ensure_gitignore,
    load_author_context,
    provision_author,
    save_author_context,
)

__all__ = [
    "ProjectSettings",
    "ConfigError",
    "EventLayout",
    "ValidationResult",
    "AuthorContext",
    "ensure_gitignore",
    "load_author_context",
    "provision_author",
    "save_author_context",
]
