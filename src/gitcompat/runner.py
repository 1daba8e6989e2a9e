"""
Run coordinator.

A run has two passes, strictly in this order:

1. the remap pass, which moves maps that requested a new id. If it changed
   anything the run stops with ``ReloadRequired``; the editor's copy of
   the project no longer matches the disk.
2. the formatting pass, which rewrites every document in the tree into its
   canonical layout. All documents are prepared in memory first, so a
   structural error or a declined confirmation leaves every file as it was.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .documents.codec import encode_document, load_document, write_document
from .documents.models import EVENTS_KEY, MAP_INDEX_FILENAME, Document, is_map_filename
from .documents.redaction import redact_document
from .documents.scanner import iter_documents
from .errors import ConfigError, OperatorDeclined, ReloadRequired, StructuralError
from .events.grid import build_grid_table, check_dimensions, collect_objects
from .events.partitioned import DisplacedObject, allocate_partitioned
from .maps.map_index import normalize_index
from .maps.remapper import RemapReport, remap_project
from .settings import AuthorContext, EventLayout, ProjectSettings, save_author_context

Displacement = Tuple[str, DisplacedObject]
ConfirmCallback = Callable[[List[Displacement]], bool]


@dataclass
class PreparedDocument:
    """A document serialized and ready to be written."""

    path: Path
    text: str
    displaced: List[DisplacedObject] = field(default_factory=list)
    over_threshold: bool = False


@dataclass
class RunReport:
    """Summary of a completed run."""

    remap: RemapReport
    scanned: int = 0
    written: List[Path] = field(default_factory=list)
    crowded_maps: List[str] = field(default_factory=list)
    displaced: List[Displacement] = field(default_factory=list)


class ProjectRunner:
    """Runs the remap and formatting passes over one project."""

    def __init__(
        self,
        settings: ProjectSettings,
        author: Optional[AuthorContext] = None,
        confirm: Optional[ConfirmCallback] = None,
    ):
        """Initialize the runner.

        Args:
            settings: Project settings
            author: Running author; required for the partitioned layout
            confirm: Asked before events are taken from retired authors.
                Without it such a run is declined.
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.settings = settings
        self.author = author
        self.confirm = confirm

        self._partitioned = (
            settings.manage_events and settings.event_layout == EventLayout.PARTITIONED
        )
        if self._partitioned and author is None:
            raise ConfigError("The partitioned event layout needs an author context")

    def run(self) -> RunReport:
        """Run both passes.

        Returns:
            RunReport

        Raises:
            ReloadRequired: If maps were remapped
            OperatorDeclined: If a destructive re-stripe was refused
            PlanConflictError: If remap requests conflict
            StructuralError: If a document cannot be laid out
        """
        start = time.perf_counter()

        remap = remap_project(self.settings.data_path)
        if remap.changed:
            raise ReloadRequired(
                f"Moved {len(remap.plan)} map(s) and updated {len(remap.fixed)} document(s); "
                "reload the project in the editor, then run again"
            )

        report = RunReport(remap=remap)
        prepared = self._prepare_all(report)
        self._confirm_displaced(report.displaced)

        for document in prepared:
            if write_document(document.path, document.text):
                self.logger.info(f"Formatted '{document.path}'")
                report.written.append(document.path)

        if self._partitioned and self.author is not None:
            save_author_context(
                self.settings.project_root,
                self.author.committed(self.settings.buffer_capacity),
            )

        elapsed = (time.perf_counter() - start) * 1000
        self.logger.info(
            f"Formatted {len(report.written)} of {report.scanned} file(s) in {elapsed:.0f} ms"
        )
        return report

    def _prepare_all(self, report: RunReport) -> List[PreparedDocument]:
        """Prepare every document of the tree, writing nothing."""
        root = self.settings.format_root
        prepared: List[PreparedDocument] = []

        for path in iter_documents(root, self.settings.excluded_directories):
            document = self.prepare_document(path)
            prepared.append(document)
            report.scanned += 1

            report.displaced.extend((path.name, item) for item in document.displaced)
            if document.over_threshold:
                report.crowded_maps.append(path.name)
                self.logger.warning(
                    f"'{path.name}' has more than {self.settings.warning_threshold:.0%} "
                    f"of its {self.settings.buffer_capacity} grid slots in use"
                )

        return prepared

    def prepare_document(self, path: Path) -> PreparedDocument:
        """Load a document and serialize it in its canonical layout."""
        document = load_document(path)
        compact: Tuple[str, ...] = ()
        prepared = PreparedDocument(path=path, text="")

        if self.settings.manage_events and is_map_filename(path.name):
            document = self._layout_map(path, document, prepared)
            compact = (EVENTS_KEY,)
        elif path.name.lower() == MAP_INDEX_FILENAME.lower() and isinstance(document, list):
            document = normalize_index(document)

        if self.settings.redact:
            document = redact_document(path.name, document)

        prepared.text = encode_document(document, compact)
        return prepared

    def _layout_map(self, path: Path, document: Document, prepared: PreparedDocument) -> Document:
        """Rewrite a map's event table in the configured layout."""
        if not isinstance(document, dict) or not isinstance(document.get(EVENTS_KEY), list):
            raise StructuralError(f"{path}: map document has no '{EVENTS_KEY}' array")

        width, height = check_dimensions(document.get("width"), document.get("height"))
        table = document[EVENTS_KEY]

        try:
            if self._partitioned:
                allocation = allocate_partitioned(
                    table,
                    width,
                    height,
                    self.author,  # type: ignore[arg-type]
                    self.settings.buffer_capacity,
                    self.settings.warning_threshold,
                )
                new_table = allocation.table
                prepared.displaced = allocation.displaced
                prepared.over_threshold = allocation.over_threshold
            else:
                new_table = build_grid_table(collect_objects(table), width, height)
        except StructuralError as e:
            raise StructuralError(f"{path}: {e}") from e

        laid_out = dict(document)
        laid_out[EVENTS_KEY] = new_table
        return laid_out

    def _confirm_displaced(self, displaced: List[Displacement]) -> None:
        """Ask before events are handed to the running author by a layout change."""
        author = self.author
        if not displaced or author is None:
            return

        previous_capacity = author.previous_buffer_capacity or self.settings.buffer_capacity
        self.logger.warning(
            f"Changing authors from {author.previous_max_users} to {author.max_users} and "
            f"grid slots from {previous_capacity} to {self.settings.buffer_capacity} "
            f"moves {len(displaced)} event(s) to author {author.user_id}:"
        )
        for filename, item in displaced:
            source = (
                f"author {item.from_user}" if item.from_user is not None else "the grid region"
            )
            self.logger.warning(f"  {filename}: {item.object.get('name')!r} from {source}")

        if self.confirm is None or not self.confirm(displaced):
            raise OperatorDeclined(
                "Event reassignment not confirmed; no files were changed"
            )
        self.logger.info("Event reassignment confirmed")
