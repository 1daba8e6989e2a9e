"""
Cross-map reference fixup.

After maps change id, every command that sends the player (or a vehicle)
to another map must point at the new id. Commands appear wherever the
project stores event command lists: map event pages, common events and
troop pages.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from ..documents.codec import encode_document, load_document, write_document
from ..documents.models import (
    COMMON_EVENTS_FILENAME,
    EVENTS_KEY,
    SYSTEM_FILENAME,
    TROOPS_FILENAME,
    is_map_filename,
)

logger = logging.getLogger(__name__)

# Event command code -> (designation parameter index, map id parameter index)
TRANSFER_COMMANDS: Dict[int, Tuple[int, int]] = {
    201: (0, 1),  # Transfer Player
    202: (1, 2),  # Set Vehicle Location
}

# Designation 0 means the map id is given directly; 1 means it is a variable id
DIRECT_DESIGNATION = 0

VEHICLE_KEYS = ("boat", "ship", "airship")


def remap_command(command: Dict[str, Any], mapping: Mapping[int, int]) -> bool:
    """Rewrite a transfer command's target map in place.

    Returns:
        True if the command was changed
    """
    indices = TRANSFER_COMMANDS.get(command.get("code"))  # type: ignore[arg-type]
    if indices is None:
        return False

    parameters = command.get("parameters")
    designation_index, map_index = indices
    if not isinstance(parameters, list) or len(parameters) <= map_index:
        return False
    if parameters[designation_index] != DIRECT_DESIGNATION:
        return False

    target = parameters[map_index]
    if target not in mapping or mapping[target] == target:
        return False

    parameters[map_index] = mapping[target]
    return True


def remap_commands(value: Any, mapping: Mapping[int, int]) -> int:
    """Rewrite every transfer command found anywhere inside ``value``.

    Returns:
        Number of commands changed
    """
    changed = 0
    if isinstance(value, dict):
        if "code" in value and "parameters" in value:
            changed += remap_command(value, mapping)
        for item in value.values():
            changed += remap_commands(item, mapping)
    elif isinstance(value, list):
        for item in value:
            changed += remap_commands(item, mapping)
    return changed


def remap_system(document: Dict[str, Any], mapping: Mapping[int, int]) -> int:
    """Rewrite the player and vehicle start maps in System.json."""
    holders = [document] + [
        document[key] for key in VEHICLE_KEYS if isinstance(document.get(key), dict)
    ]
    changed = 0
    for holder in holders:
        start = holder.get("startMapId")
        if start in mapping and mapping[start] != start:
            holder["startMapId"] = mapping[start]
            changed += 1
    return changed


def fix_references(data_dir: Path, mapping: Mapping[int, int]) -> List[Path]:
    """Rewrite cross-map references in every document that can hold them.

    Args:
        data_dir: Project data directory, after map files were renamed
        mapping: Old map id -> new map id

    Returns:
        Paths of the documents that were rewritten
    """
    if all(source == target for source, target in mapping.items()):
        return []

    fixed: List[Path] = []
    for path in sorted(data_dir.iterdir()):
        if not path.is_file():
            continue

        if is_map_filename(path.name):
            document = load_document(path)
            changed = remap_commands(document.get(EVENTS_KEY), mapping)
            compact = (EVENTS_KEY,)
        elif path.name in (COMMON_EVENTS_FILENAME, TROOPS_FILENAME):
            document = load_document(path)
            changed = remap_commands(document, mapping)
            compact = ()
        elif path.name == SYSTEM_FILENAME:
            document = load_document(path)
            changed = remap_system(document, mapping)
            compact = ()
        else:
            continue

        if changed and write_document(path, encode_document(document, compact)):
            logger.info(f"Updated {changed} map reference(s) in '{path.name}'")
            fixed.append(path)

    return fixed
