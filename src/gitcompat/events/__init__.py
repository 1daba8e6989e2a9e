"""
Event table layouts.

Provides the single-author grid layout and the partitioned layout used
when several authors edit the same maps.
"""

from .grid import build_grid_table, collect_objects, position_slot
from .partitioned import (
    DisplacedObject,
    PartitionedAllocation,
    PartitionedTable,
    RestripeResult,
    allocate_partitioned,
    collect_streams,
    decode_partitioned,
    restripe,
)

__all__ = [
    # Grid layout
    "build_grid_table",
    "collect_objects",
    "position_slot",
    # Partitioned layout
    "allocate_partitioned",
    "collect_streams",
    "decode_partitioned",
    "restripe",
    "DisplacedObject",
    "PartitionedAllocation",
    "PartitionedTable",
    "RestripeResult",
]
