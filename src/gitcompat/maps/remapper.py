"""
Map id remapping.

New maps get whatever id the editor hands out, so two authors creating a
map at the same time both get the same id. To avoid that, an author can
claim an id by ending the map's name with ``::<n>``. On the next run the
map is moved to id ``n``: its document is renamed, its index entry moves,
and every reference to the old id is rewritten.

The whole plan is validated before anything is touched. Once renames
start there is no rollback; an interrupted run must be resolved by hand,
and the staging files it leaves behind stop every later run until it is.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from ..documents.codec import write_document
from ..documents.models import (
    MAP_INDEX_FILENAME,
    MAX_MAP_ID,
    MIN_MAP_ID,
    MapIndexTable,
    map_filename,
)
from ..errors import PlanConflictError, StructuralError
from .map_index import encode_map_index, load_map_index, normalize_index, split_remap_suffix
from .references import fix_references

logger = logging.getLogger(__name__)

STAGING_SUFFIX = ".remap"


@dataclass(frozen=True)
class RemapRequest:
    """A single request to move a map to another id."""

    from_index: int
    to_index: int
    name: str

    @property
    def is_move(self) -> bool:
        return self.from_index != self.to_index


@dataclass
class RemapReport:
    """What a remap pass did.

    Attributes:
        plan: Requests found in the index (empty if nothing was requested)
        renamed: (old filename, new filename) for every moved document
        fixed: Documents whose references were rewritten
    """

    plan: List[RemapRequest] = field(default_factory=list)
    renamed: List[Tuple[str, str]] = field(default_factory=list)
    fixed: List[Path] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Check if the project on disk was modified."""
        return bool(self.plan)


def parse_remap_plan(table: MapIndexTable) -> List[RemapRequest]:
    """Collect remap requests from map names.

    A requested id outside 1-999 is logged and ignored.
    """
    plan: List[RemapRequest] = []
    for index, entry in enumerate(table):
        if entry is None:
            continue
        name = entry.get("name")
        if not isinstance(name, str):
            continue

        _, target = split_remap_suffix(name)
        if target is None:
            continue
        if not MIN_MAP_ID <= target <= MAX_MAP_ID:
            logger.warning(
                f"Ignoring remap request on map {index} ({name!r}): "
                f"id {target} is outside {MIN_MAP_ID}-{MAX_MAP_ID}"
            )
            continue

        plan.append(RemapRequest(from_index=index, to_index=target, name=name))
    return plan


def validate_plan(table: MapIndexTable, plan: List[RemapRequest]) -> None:
    """Check that every request can be honored.

    Raises:
        PlanConflictError: If two requests share a target, or a target is
            held by a map that is not moving away
    """
    conflicts: List[str] = []

    by_target: Dict[int, List[RemapRequest]] = defaultdict(list)
    for request in plan:
        by_target[request.to_index].append(request)
    for target, requests in sorted(by_target.items()):
        if len(requests) > 1:
            names = ", ".join(repr(request.name) for request in requests)
            conflicts.append(f"{names} all request map {target}")

    sources = {request.from_index for request in plan}
    for request in plan:
        target = request.to_index
        if not request.is_move or target in sources:
            # Targets held by other requests are vacated, or already reported above
            continue
        occupant = table[target] if target < len(table) else None
        if occupant is not None:
            conflicts.append(
                f"{request.name!r} requests map {target}, "
                f"which is occupied by {occupant.get('name')!r}"
            )

    if conflicts:
        raise PlanConflictError(conflicts)


def apply_plan(
    data_dir: Path, table: MapIndexTable, plan: List[RemapRequest]
) -> Tuple[MapIndexTable, Dict[int, int], List[Tuple[str, str]]]:
    """Move map documents and index entries to their requested ids.

    Documents are first moved to staging names and then to their targets,
    so that swaps and chains never overwrite a map that is itself moving.

    Args:
        data_dir: Project data directory
        table: Map index as loaded
        plan: Validated requests

    Returns:
        (new index, old id -> new id, list of renamed filenames)
    """
    moves = [request for request in plan if request.is_move]
    renamed: List[Tuple[str, str]] = []

    staged: List[Tuple[RemapRequest, Path]] = []
    for request in moves:
        source = data_dir / map_filename(request.from_index)
        if not source.is_file():
            logger.info(
                f"No document for map {request.from_index}, relabeling index entry only"
            )
            continue
        staging = source.with_name(source.name + STAGING_SUFFIX)
        source.rename(staging)
        staged.append((request, staging))

    for request, staging in staged:
        target = data_dir / map_filename(request.to_index)
        if target.exists():
            logger.warning(f"Replacing stale document '{target.name}'")
            target.unlink()
        staging.rename(target)
        old_name = map_filename(request.from_index)
        renamed.append((old_name, target.name))
        logger.info(f"Renamed '{old_name}' to '{target.name}'")

    mapping = {request.from_index: request.to_index for request in plan}
    new_table = [dict(entry) if entry is not None else None for entry in normalize_index(table)]

    for request in moves:
        new_table[request.from_index] = None
    for request in plan:
        entry = dict(table[request.from_index])  # type: ignore[arg-type]
        entry["id"] = request.to_index
        entry["name"], _ = split_remap_suffix(request.name)
        new_table[request.to_index] = entry

    for entry in new_table:
        if entry is not None and entry.get("parentId") in mapping:
            entry["parentId"] = mapping[entry["parentId"]]

    return new_table, mapping, renamed


def remap_project(data_dir: Path) -> RemapReport:
    """Run the remap pass over a project's data directory.

    Returns:
        RemapReport; ``report.changed`` means the project must be reloaded
        before anything else runs

    Raises:
        PlanConflictError: If the requests conflict (nothing is written)
        StructuralError: If a previous remap was interrupted, or the index
            has entries past the last id (nothing is written)
    """
    staged = sorted(path.name for path in data_dir.glob("*" + STAGING_SUFFIX))
    if staged:
        raise StructuralError(
            "An earlier remap was interrupted; restore or remove these files by hand: "
            + ", ".join(staged)
        )

    index_path = data_dir / MAP_INDEX_FILENAME
    if not index_path.is_file():
        logger.debug(f"No map index at '{index_path}', skipping remap")
        return RemapReport()

    table = normalize_index(load_map_index(index_path))
    plan = parse_remap_plan(table)
    if not plan:
        return RemapReport()

    logger.info(f"Found {len(plan)} map remap request(s)")
    validate_plan(table, plan)

    new_table, mapping, renamed = apply_plan(data_dir, table, plan)
    fixed = fix_references(data_dir, mapping)
    write_document(index_path, encode_map_index(new_table))

    return RemapReport(plan=plan, renamed=renamed, fixed=fixed)
