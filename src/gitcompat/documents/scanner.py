"""
Discovery of JSON documents inside a project tree.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, List

logger = logging.getLogger(__name__)


def iter_documents(root: Path, excluded: Iterable[str] = (".git",)) -> Iterator[Path]:
    """Yield every ``*.json`` file below ``root`` in a stable order.

    Args:
        root: Directory to scan
        excluded: Directory names to skip (case-insensitive)

    Yields:
        Paths to JSON documents, sorted per directory
    """
    skipped = {name.lower() for name in excluded}
    pending: List[Path] = [root]

    while pending:
        directory = pending.pop()
        logger.debug(f"Scanning directory '{directory}'...")
        subdirectories: List[Path] = []

        for entry in sorted(directory.iterdir()):
            if entry.is_dir():
                if entry.name.lower() in skipped:
                    logger.debug(f"Skipping excluded directory '{entry}'")
                    continue
                subdirectories.append(entry)
            elif entry.name.lower().endswith(".json"):
                yield entry

        # Reversed so that subdirectories are visited in sorted order
        pending.extend(reversed(subdirectories))
