"""
Exception hierarchy for git-compat-patch.

Two of these are not failures: ``ReloadRequired`` and ``OperatorDeclined``
are terminal outcomes that stop the run before any stale state is used.
The command line maps each kind to its own exit code.
"""

from typing import List, Optional


class GitCompatError(Exception):
    """Base class for every error raised by git-compat-patch."""
    pass


class ConfigError(GitCompatError):
    """Raised when configuration is invalid or cannot be accessed."""
    pass


class DocumentError(GitCompatError):
    """Raised when a project document cannot be read or parsed."""

    def __init__(self, path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class StructuralError(GitCompatError):
    """Raised when a document violates a structural invariant of its layout."""
    pass


class EventCollisionError(StructuralError):
    """Raised when two events claim the same tile of a map."""

    def __init__(self, x: int, y: int, first: Optional[str], second: Optional[str]):
        super().__init__(
            f"Events {first!r} and {second!r} both occupy tile ({x}, {y}); "
            "resolve the overlap in the editor"
        )
        self.x = x
        self.y = y


class PlanConflictError(GitCompatError):
    """Raised when the requested map remaps cannot all be applied."""

    def __init__(self, conflicts: List[str]):
        super().__init__(
            "Conflicting map remap requests:\n  - " + "\n  - ".join(conflicts)
        )
        self.conflicts = conflicts


class ReloadRequired(GitCompatError):
    """The on-disk layout changed; the editor must reload the project."""
    pass


class OperatorDeclined(GitCompatError):
    """The operator refused a destructive operation; nothing was written."""
    pass
