"""
Per-user editor state redaction.

The editor stores some values that differ for every person who opens the
project (scroll positions, expanded tree nodes, a save counter). Left alone
they produce a diff on every commit, so they are reset to fixed values
before a document is written.
"""

from typing import Any, Callable, Dict, Optional

from .models import MAP_INDEX_FILENAME, SYSTEM_FILENAME

Replacements = Dict[str, Any]

SYSTEM_REPLACEMENTS: Replacements = {"versionId": 0}
MAP_INDEX_REPLACEMENTS: Replacements = {
    "scrollX": 0,
    "scrollY": 0,
    "expanded": False,
}

_REPLACEMENTS_BY_FILENAME: Dict[str, Replacements] = {
    SYSTEM_FILENAME.lower(): SYSTEM_REPLACEMENTS,
    MAP_INDEX_FILENAME.lower(): MAP_INDEX_REPLACEMENTS,
}


def get_replacements_for(filename: str) -> Optional[Replacements]:
    """Get the key replacements for a document filename, if it has any."""
    return _REPLACEMENTS_BY_FILENAME.get(filename.lower())


def replace_keys(value: Any, replacements: Replacements) -> Any:
    """Return a copy of ``value`` with matching keys replaced at any depth."""
    if isinstance(value, dict):
        return {
            key: replacements[key] if key in replacements else replace_keys(item, replacements)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [replace_keys(item, replacements) for item in value]
    return value


def redact_document(filename: str, document: Any) -> Any:
    """Reset per-user editor state in a document.

    Documents without known per-user fields are returned unchanged.
    """
    replacements = get_replacements_for(filename)
    if replacements is None:
        return document
    return replace_keys(document, replacements)
