"""
The map index (MapInfos.json).

The index is an array addressed by map id; each entry's id is also the
number in its map document's filename. It is kept at a fixed length so
that two authors creating maps with different ids never both change the
array's length.
"""

import re
from pathlib import Path
from typing import Optional, Tuple

from ..documents.codec import encode_document, load_document
from ..documents.models import MAP_INDEX_SIZE, MapIndexTable
from ..errors import StructuralError

# Trailing "::<n>" on a map name requests map id n
REMAP_SUFFIX_RE = re.compile(r"::\s*(\d+)\s*$")


def split_remap_suffix(name: str) -> Tuple[str, Optional[int]]:
    """Split a map name into its display part and requested id.

    Example:
        >>> split_remap_suffix("Forest Cave::42")
        ('Forest Cave', 42)
        >>> split_remap_suffix("Town")
        ('Town', None)
    """
    match = REMAP_SUFFIX_RE.search(name)
    if match is None:
        return name, None
    return name[: match.start()].rstrip(), int(match.group(1))


def normalize_index(table: MapIndexTable) -> MapIndexTable:
    """Pad or trim the index to exactly MAP_INDEX_SIZE slots.

    Raises:
        StructuralError: If an entry exists past the last allowed id
    """
    if len(table) > MAP_INDEX_SIZE:
        extra = [entry for entry in table[MAP_INDEX_SIZE:] if entry is not None]
        if extra:
            raise StructuralError(
                f"Map index has entries past id {MAP_INDEX_SIZE - 1}: "
                + ", ".join(repr(entry.get("name")) for entry in extra)
            )
        return list(table[:MAP_INDEX_SIZE])
    return list(table) + [None] * (MAP_INDEX_SIZE - len(table))


def load_map_index(path: Path) -> MapIndexTable:
    """Load the map index from disk.

    Raises:
        DocumentError: If the file cannot be parsed
        StructuralError: If the document is not an array of entries
    """
    table = load_document(path)
    if not isinstance(table, list):
        raise StructuralError(f"{path}: map index must be an array")
    for index, entry in enumerate(table):
        if entry is not None and not isinstance(entry, dict):
            raise StructuralError(f"{path}: entry {index} is neither null nor an object")
    return table


def encode_map_index(table: MapIndexTable) -> str:
    """Serialize the map index at its fixed length."""
    return encode_document(normalize_index(table))
