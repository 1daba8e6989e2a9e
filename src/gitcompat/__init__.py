"""
git-compat-patch: merge-friendly layout for RPG Maker MV projects

Rewrites a project's data files on every build so that several authors
can edit the same maps and merge their work with a line-based merge tool.
"""

__version__ = "0.1.0"
__author__ = "git-compat-patch Contributors"

# Core service imports
from .runner import ProjectRunner, RunReport
from .settings import AuthorContext, ProjectSettings
from .utils.logging_config import setup_logging

# Errors and terminal outcomes
from .errors import (
    GitCompatError, ConfigError, DocumentError, StructuralError,
    EventCollisionError, PlanConflictError, ReloadRequired, OperatorDeclined,
)

__all__ = [
    # Services
    'ProjectRunner',
    'RunReport',
    'ProjectSettings',
    'AuthorContext',

    # Logging
    'setup_logging',

    # Errors
    'GitCompatError',
    'ConfigError',
    'DocumentError',
    'StructuralError',
    'EventCollisionError',
    'PlanConflictError',
    'ReloadRequired',
    'OperatorDeclined',
]
