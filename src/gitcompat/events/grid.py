"""
Position-addressed event tables.

A map's events are stored in an array whose index is the event id. Giving
every tile its own slot (``y * width + x + 1``) means two authors who add
events on different tiles touch different lines of the file. Slot 0 is
always empty; the editor expects event ids to start at 1.
"""

from typing import Iterable, Tuple

from ..documents.models import ObjectTable, SceneObject
from ..errors import EventCollisionError, StructuralError


def position_slot(x: int, y: int, width: int) -> int:
    """Get the grid slot of a tile."""
    return y * width + x + 1


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_dimensions(width: object, height: object) -> Tuple[int, int]:
    """Validate map dimensions.

    Raises:
        StructuralError: If width or height is not a non-negative integer
    """
    if not _is_int(width) or not _is_int(height) or width < 0 or height < 0:  # type: ignore[operator]
        raise StructuralError(
            f"Map dimensions must be non-negative integers, got {width}x{height}"
        )
    return width, height  # type: ignore[return-value]


def object_position(obj: SceneObject, width: int, height: int) -> Tuple[int, int]:
    """Get an event's tile, checking it lies inside the map.

    Raises:
        StructuralError: If coordinates are missing, not integers, or out of bounds
    """
    x = obj.get("x")
    y = obj.get("y")
    if not _is_int(x) or not _is_int(y):
        raise StructuralError(f"Event {obj.get('name')!r} has no integer position")
    if not (0 <= x < width and 0 <= y < height):  # type: ignore[operator]
        raise StructuralError(
            f"Event {obj.get('name')!r} at ({x}, {y}) lies outside the {width}x{height} map"
        )
    return x, y  # type: ignore[return-value]


def with_slot(obj: SceneObject, slot: int) -> SceneObject:
    """Copy an event, setting its id to the slot it occupies."""
    placed = dict(obj)
    placed["id"] = slot
    return placed


def build_grid_table(objects: Iterable[SceneObject], width: int, height: int) -> ObjectTable:
    """Place events into a position-addressed table.

    Args:
        objects: Events in any order
        width: Map width in tiles
        height: Map height in tiles

    Returns:
        Table of length ``width * height + 1`` with each event at its tile's
        slot and its id equal to that slot

    Raises:
        EventCollisionError: If two events share a tile
        StructuralError: If an event lies outside the map
    """
    check_dimensions(width, height)
    table: ObjectTable = [None] * (width * height + 1)

    for obj in objects:
        x, y = object_position(obj, width, height)
        slot = position_slot(x, y, width)
        occupant = table[slot]
        if occupant is not None:
            raise EventCollisionError(x, y, occupant.get("name"), obj.get("name"))
        table[slot] = with_slot(obj, slot)

    return table


def collect_objects(table: ObjectTable) -> list[SceneObject]:
    """Get the events of a table in slot order, dropping empty slots."""
    return [obj for obj in table if obj is not None]
