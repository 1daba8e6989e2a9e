"""
Event tables shared by several authors.

The table is split in two regions:

* the grid region, slots ``1..buffer_capacity``, addressed by tile exactly
  like a single-author table;
* the overflow region after it, cut into blocks of ``max_users`` slots.
  Slot ``k`` of every block belongs to author ``k + 1``, so each author
  appends to a private stream and never writes a slot another author owns.

When the number of authors changes the overflow region is re-striped to the
new block size. Growing keeps every object where its stream had it.
Shrinking hands the objects of retired authors to whoever runs the
re-stripe; those objects are reported back so the caller can ask before
committing the result.

Everything here is pure: tables go in, new tables come out.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..documents.models import ObjectTable, SceneObject
from ..errors import EventCollisionError, StructuralError
from ..settings.authors import AuthorContext
from .grid import check_dimensions, object_position, position_slot, with_slot

logger = logging.getLogger(__name__)

Stream = List[Optional[SceneObject]]


@dataclass
class PartitionedTable:
    """A decoded shared table.

    Attributes:
        grid: Grid-region events at their tile's slot, keyed by slot
        streams: Per-author overflow streams (index 0 is author 1). Holes
            left by deleted events are kept as None; trailing holes are not.
        pending: Events found in the grid region at a slot that does not
            match their tile. These were created or moved since the
            previous run.
    """

    grid: Dict[int, SceneObject] = field(default_factory=dict)
    streams: List[Stream] = field(default_factory=list)
    pending: List[SceneObject] = field(default_factory=list)


@dataclass(frozen=True)
class DisplacedObject:
    """An event handed to the running author by a layout change.

    Attributes:
        object: The event
        from_user: The retired author whose stream held it, or None if it
            sat in the part of the grid region cut off by a smaller
            buffer capacity
    """

    object: SceneObject
    from_user: Optional[int]


@dataclass
class RestripeResult:
    """Streams laid out for the new author count."""

    streams: List[Stream]
    displaced: List[DisplacedObject] = field(default_factory=list)


@dataclass
class PartitionedAllocation:
    """Result of rewriting one shared table.

    Attributes:
        table: The new table, sentinel included
        displaced: Events reassigned to the running author by a shrink
        grid_occupancy: Number of occupied grid-region slots
        over_threshold: True if grid occupancy exceeds the warning threshold
    """

    table: ObjectTable
    displaced: List[DisplacedObject]
    grid_occupancy: int
    over_threshold: bool


def stream_slot(buffer_capacity: int, stride: int, user_id: int, position: int) -> int:
    """Get the table slot of the ``position``-th entry of an author's stream."""
    return buffer_capacity + 1 + position * stride + (user_id - 1)


def decode_partitioned(
    table: ObjectTable, width: int, height: int, buffer_capacity: int, stride: int
) -> PartitionedTable:
    """Split a shared table into grid events, author streams and pending events.

    Args:
        table: Table as read from disk
        width: Map width in tiles
        height: Map height in tiles
        buffer_capacity: Size of the grid region
        stride: Author count the table was written with

    Returns:
        PartitionedTable
    """
    check_dimensions(width, height)
    decoded = PartitionedTable(streams=[[] for _ in range(stride)])

    for slot, obj in enumerate(table):
        if obj is None:
            continue

        if slot <= buffer_capacity:
            x, y = object_position(obj, width, height)
            if slot == position_slot(x, y, width):
                decoded.grid[slot] = obj
            else:
                decoded.pending.append(obj)
            continue

        block, author_index = divmod(slot - buffer_capacity - 1, stride)
        stream = decoded.streams[author_index]
        stream.extend([None] * (block - len(stream)))
        stream.append(obj)

    return decoded


def restripe(
    streams: List[Stream], previous_max_users: int, max_users: int, user_id: int
) -> RestripeResult:
    """Lay author streams out for a new author count.

    Args:
        streams: One stream per previous author
        previous_max_users: Author count the streams were decoded with
        max_users: New author count
        user_id: The running author, who receives displaced events

    Returns:
        RestripeResult with ``max_users`` streams
    """
    if len(streams) != previous_max_users:
        raise StructuralError(
            f"Expected {previous_max_users} streams, got {len(streams)}"
        )

    if max_users >= previous_max_users:
        grown = [list(stream) for stream in streams]
        grown.extend([] for _ in range(max_users - previous_max_users))
        return RestripeResult(streams=grown)

    kept = [list(stream) for stream in streams[:max_users]]
    retired = streams[max_users:]
    depth = max((len(stream) for stream in retired), default=0)

    # Walk the old overflow region block by block
    displaced: List[DisplacedObject] = []
    for position in range(depth):
        for offset, stream in enumerate(retired):
            if position < len(stream) and stream[position] is not None:
                displaced.append(
                    DisplacedObject(object=stream[position], from_user=max_users + offset + 1)  # type: ignore[arg-type]
                )

    kept[user_id - 1].extend(item.object for item in displaced)
    return RestripeResult(streams=kept, displaced=displaced)


def layout_streams(streams: List[Stream], buffer_capacity: int) -> ObjectTable:
    """Interleave streams into the overflow region, ids rewritten to their slots."""
    stride = len(streams)
    depth = max((len(stream) for stream in streams), default=0)
    overflow: ObjectTable = [None] * (depth * stride)

    for user_index, stream in enumerate(streams):
        for position, obj in enumerate(stream):
            if obj is None:
                continue
            slot = stream_slot(buffer_capacity, stride, user_index + 1, position)
            overflow[slot - buffer_capacity - 1] = with_slot(obj, slot)

    return overflow


def allocate_partitioned(
    table: ObjectTable,
    width: int,
    height: int,
    context: AuthorContext,
    buffer_capacity: int,
    warning_threshold: float,
) -> PartitionedAllocation:
    """Rewrite a shared table for the running author.

    Decodes the table with the previous author count and grid size,
    re-stripes if the count changed, then places pending events: on their
    tile's slot when it lies in the grid region, otherwise at the end of
    the running author's stream.

    When the grid region shrank, events on the cut-off slots move to the
    end of the running author's stream and are reported as displaced
    along with those of retired authors.

    Args:
        table: Table as read from disk
        width: Map width in tiles
        height: Map height in tiles
        context: Running author, author counts and previous grid size
        buffer_capacity: Size of the grid region
        warning_threshold: Fraction of the grid region that may fill up
            before the allocation is flagged

    Returns:
        PartitionedAllocation

    Raises:
        EventCollisionError: If a pending event lands on an occupied tile
        StructuralError: If a grid-region event lies outside the map
    """
    previous_capacity = context.previous_buffer_capacity or buffer_capacity
    decoded = decode_partitioned(
        table, width, height, previous_capacity, context.previous_max_users
    )
    restriped = restripe(
        decoded.streams, context.previous_max_users, context.max_users, context.user_id
    )

    grid: Dict[int, SceneObject] = {}
    cut_off: List[DisplacedObject] = []
    for slot, obj in decoded.grid.items():
        if slot <= buffer_capacity:
            grid[slot] = obj
        else:
            cut_off.append(DisplacedObject(object=obj, from_user=None))

    own_stream = restriped.streams[context.user_id - 1]
    own_stream.extend(item.object for item in cut_off)
    if cut_off:
        logger.debug(
            f"Grid region shrank from {previous_capacity} to {buffer_capacity}, "
            f"moving {len(cut_off)} event(s) to author {context.user_id}"
        )

    for obj in decoded.pending:
        x, y = object_position(obj, width, height)
        slot = position_slot(x, y, width)
        if slot > buffer_capacity:
            own_stream.append(obj)
            continue
        occupant = grid.get(slot)
        if occupant is not None:
            raise EventCollisionError(x, y, occupant.get("name"), obj.get("name"))
        grid[slot] = obj

    new_table: ObjectTable = [None] * (buffer_capacity + 1)
    for slot, obj in grid.items():
        new_table[slot] = with_slot(obj, slot)
    new_table.extend(layout_streams(restriped.streams, buffer_capacity))

    occupancy = len(grid)
    over_threshold = occupancy > warning_threshold * buffer_capacity
    if decoded.pending:
        logger.debug(
            f"Placed {len(decoded.pending)} new event(s) for author {context.user_id}"
        )

    return PartitionedAllocation(
        table=new_table,
        displaced=restriped.displaced + cut_off,
        grid_occupancy=occupancy,
        over_threshold=over_threshold,
    )


def collect_streams(
    table: ObjectTable, width: int, height: int, buffer_capacity: int, stride: int
) -> List[List[SceneObject]]:
    """Get each author's events in stream order, holes dropped."""
    decoded = decode_partitioned(table, width, height, buffer_capacity, stride)
    return [[obj for obj in stream if obj is not None] for stream in decoded.streams]
