"""
Data models for project documents.

Keeps the dict-based approach of the parsed JSON: documents are passed
through mostly untouched, so only the fields the tool reads get names here.
"""

import re
from typing import Any, Dict, List, Optional, TypeAlias

# Type aliases for clarity
Document: TypeAlias = Dict[str, Any]
"""A parsed top-level JSON object (a map, System.json, ...)."""

SceneObject: TypeAlias = Dict[str, Any]
"""A single map event. Only ``id``, ``x`` and ``y`` are interpreted."""

ObjectTable: TypeAlias = List[Optional[SceneObject]]
"""A map's position-addressed event table; slot 0 is always None."""

MapIndexEntry: TypeAlias = Dict[str, Any]
"""A single MapInfos.json entry."""

MapIndexTable: TypeAlias = List[Optional[MapIndexEntry]]
"""The whole MapInfos.json array, indexed by map id."""


# Well-known filenames inside the data directory
DATA_DIR_NAME = "data"
MAP_INDEX_FILENAME = "MapInfos.json"
SYSTEM_FILENAME = "System.json"
COMMON_EVENTS_FILENAME = "CommonEvents.json"
TROOPS_FILENAME = "Troops.json"

# Key holding the object table inside a map document
EVENTS_KEY = "events"

# Map index is kept at a fixed number of slots (ids 0-999, 0 unused)
MAP_INDEX_SIZE = 1000
MIN_MAP_ID = 1
MAX_MAP_ID = MAP_INDEX_SIZE - 1

MAP_FILENAME_RE = re.compile(r"^[Mm]ap(\d{3})\.json$")


def map_filename(map_id: int) -> str:
    """Get the document filename for a map id (e.g. 7 -> 'Map007.json')."""
    return f"Map{map_id:03d}.json"


def is_map_filename(filename: str) -> bool:
    """Check if a filename names a map document."""
    return MAP_FILENAME_RE.match(filename) is not None
