"""
Author identity for multi-author projects.

Every author keeps small files at the project root, outside version
control: their own user id, and the number of authors and grid region
size observed on their previous run. The latter two tell the partitioned
event layout how the tables on disk were written, so that a change can be
migrated instead of misreading the old layout.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional

from ..errors import ConfigError

logger = logging.getLogger(__name__)

USER_ID_FILENAME = ".gitcompat-user"
PREVIOUS_MAX_USERS_FILENAME = ".gitcompat-max-users"
PREVIOUS_BUFFER_CAPACITY_FILENAME = ".gitcompat-buffer-capacity"
LOG_DIRECTORY_IGNORE = "logs/"
GITIGNORE_FILENAME = ".gitignore"


@dataclass(frozen=True)
class AuthorContext:
    """Who is running, and how many authors the project is laid out for.

    Attributes:
        user_id: The running author's id (1-based)
        max_users: Current number of author streams
        previous_max_users: Number of streams the tables on disk were written with
        previous_buffer_capacity: Grid region size the tables on disk were
            written with, None if it was never recorded
    """

    user_id: int
    max_users: int
    previous_max_users: int
    previous_buffer_capacity: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate ranges."""
        if self.max_users < 1:
            raise ConfigError(f"Invalid max users: {self.max_users}, must be >= 1")
        if self.previous_max_users < 1:
            raise ConfigError(
                f"Invalid previous max users: {self.previous_max_users}, must be >= 1"
            )
        if self.previous_buffer_capacity is not None and self.previous_buffer_capacity < 1:
            raise ConfigError(
                f"Invalid previous buffer capacity: {self.previous_buffer_capacity}, must be >= 1"
            )
        if not 1 <= self.user_id <= self.max_users:
            raise ConfigError(
                f"Invalid user id: {self.user_id}, must be between 1 and {self.max_users}"
            )

    @property
    def needs_restripe(self) -> bool:
        """Check if the author count changed since the previous run."""
        return self.max_users != self.previous_max_users

    @property
    def is_shrinking(self) -> bool:
        """Check if authors are being retired."""
        return self.max_users < self.previous_max_users

    def committed(self, buffer_capacity: Optional[int] = None) -> "AuthorContext":
        """Get the context to persist once the current layout is on disk.

        Args:
            buffer_capacity: Grid region size the tables were just written
                with; the recorded one is kept if omitted
        """
        if buffer_capacity is None:
            buffer_capacity = self.previous_buffer_capacity
        return replace(
            self,
            previous_max_users=self.max_users,
            previous_buffer_capacity=buffer_capacity,
        )


def _read_int(path: Path) -> Optional[int]:
    """Read a single integer from a text file, None if absent."""
    if not path.is_file():
        return None
    text = path.read_text(encoding="utf-8").strip()
    try:
        return int(text)
    except ValueError as e:
        raise ConfigError(f"Expected an integer in {path}, found {text!r}") from e


def load_author_context(project_root: Path, max_users: int) -> AuthorContext:
    """Load the running author's context.

    Args:
        project_root: Project directory holding the identity files
        max_users: Current author count from project settings

    Returns:
        AuthorContext for this run

    Raises:
        ConfigError: If the user id file is missing or malformed
    """
    user_id = _read_int(project_root / USER_ID_FILENAME)
    if user_id is None:
        raise ConfigError(
            f"No author identity found in {project_root}. "
            "Run 'gitcompat init --user-id N' first"
        )

    previous = _read_int(project_root / PREVIOUS_MAX_USERS_FILENAME)
    if previous is None:
        logger.info("No previous author count recorded, assuming no change")
        previous = max_users

    context = AuthorContext(
        user_id=user_id,
        max_users=max_users,
        previous_max_users=previous,
        previous_buffer_capacity=_read_int(project_root / PREVIOUS_BUFFER_CAPACITY_FILENAME),
    )
    logger.debug(f"Loaded author context: {context}")
    return context


def _write_int(path: Path, value: int) -> None:
    """Write a single integer to a text file unless it already holds it."""
    text = f"{value}\n"
    if path.is_file() and path.read_text(encoding="utf-8") == text:
        return
    path.write_text(text, encoding="utf-8")


def save_author_context(project_root: Path, context: AuthorContext) -> None:
    """Persist the author context for the next run."""
    _write_int(project_root / USER_ID_FILENAME, context.user_id)
    _write_int(project_root / PREVIOUS_MAX_USERS_FILENAME, context.previous_max_users)
    if context.previous_buffer_capacity is not None:
        _write_int(
            project_root / PREVIOUS_BUFFER_CAPACITY_FILENAME, context.previous_buffer_capacity
        )


def provision_author(
    project_root: Path, user_id: int, max_users: int, buffer_capacity: Optional[int] = None
) -> AuthorContext:
    """Create the identity files for a first run.

    Existing previous-author-count and buffer-capacity files are kept,
    since they describe the layout already on disk.
    """
    previous = _read_int(project_root / PREVIOUS_MAX_USERS_FILENAME) or max_users
    previous_capacity = (
        _read_int(project_root / PREVIOUS_BUFFER_CAPACITY_FILENAME) or buffer_capacity
    )
    context = AuthorContext(
        user_id=user_id,
        max_users=max_users,
        previous_max_users=previous,
        previous_buffer_capacity=previous_capacity,
    )
    save_author_context(project_root, context)
    logger.info(f"Provisioned author {user_id} of {max_users} in {project_root}")
    return context


def ensure_gitignore(project_root: Path) -> List[str]:
    """Add the per-author files to the project's .gitignore.

    Returns:
        The entries that were added
    """
    gitignore = project_root / GITIGNORE_FILENAME
    existing = gitignore.read_text(encoding="utf-8") if gitignore.is_file() else ""
    present = {line.strip() for line in existing.splitlines()}

    entries = (
        USER_ID_FILENAME,
        PREVIOUS_MAX_USERS_FILENAME,
        PREVIOUS_BUFFER_CAPACITY_FILENAME,
        LOG_DIRECTORY_IGNORE,
    )
    missing = [entry for entry in entries if entry not in present]
    if missing:
        prefix = "" if not existing or existing.endswith("\n") else "\n"
        gitignore.write_text(existing + prefix + "\n".join(missing) + "\n", encoding="utf-8")
        logger.info(f"Added to {gitignore}: {', '.join(missing)}")
    return missing
