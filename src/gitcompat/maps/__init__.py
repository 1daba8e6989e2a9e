"""Map index handling: id remapping and cross-map reference fixup."""

from .map_index import (
    encode_map_index,
    load_map_index,
    normalize_index,
    split_remap_suffix,
)
from .references import TRANSFER_COMMANDS, fix_references, remap_commands
from .remapper import (
    RemapReport,
    RemapRequest,
    apply_plan,
    parse_remap_plan,
    remap_project,
    validate_plan,
)

__all__ = [
    "encode_map_index",
    "load_map_index",
    "normalize_index",
    "split_remap_suffix",
    "TRANSFER_COMMANDS",
    "fix_references",
    "remap_commands",
    "RemapReport",
    "RemapRequest",
    "apply_plan",
    "parse_remap_plan",
    "remap_project",
    "validate_plan",
]
