"""
Main entry point for git-compat-patch.
Usage: python -m gitcompat [run|init] [PROJECT]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .errors import GitCompatError, OperatorDeclined, ReloadRequired
from .runner import Displacement, ProjectRunner
from .settings import (
    EventLayout,
    ProjectSettings,
    ensure_gitignore,
    load_author_context,
    provision_author,
)
from .utils.logging_config import setup_logging

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_RELOAD_REQUIRED = 2
EXIT_DECLINED = 3

logger = logging.getLogger("gitcompat.main")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitcompat",
        description="Rewrite an RPG Maker MV project into a merge-friendly layout",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    # ── run ──
    run_p = sub.add_parser("run", help="Remap maps and format every document")
    run_p.add_argument("project", nargs="?", default=".", help="Project directory")
    run_p.add_argument(
        "--yes", "-y", action="store_true",
        help="Confirm event reassignments after author or grid size reductions without asking",
    )

    # ── init ──
    init_p = sub.add_parser("init", help="Record the running author's identity")
    init_p.add_argument("project", nargs="?", default=".", help="Project directory")
    init_p.add_argument("--user-id", type=int, required=True, help="This author's id (1-based)")
    init_p.add_argument(
        "--max-users", type=int,
        help="Number of authors; stored in the shared project settings",
    )

    return parser


def _console_confirm(displaced: List[Displacement]) -> bool:
    """Ask the operator on the console whether to take over displaced events."""
    if not sys.stdin.isatty():
        logger.error("Confirmation required but the console is not interactive; rerun with --yes")
        return False
    answer = input(f"Take ownership of {len(displaced)} event(s) listed above? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _cmd_run(args: argparse.Namespace) -> int:
    settings = ProjectSettings(Path(args.project).resolve())
    setup_logging(settings)
    logger.info(f"Configuration loaded from {settings.get_settings_file_path()}")

    validation = settings.validate()
    for warning in validation.warnings:
        logger.warning(f"  {warning}")
    if not validation.is_valid:
        logger.error("Configuration validation failed:")
        for error in validation.errors:
            logger.error(f"  {error}")
        return EXIT_ERROR

    author = None
    if settings.manage_events and settings.event_layout == EventLayout.PARTITIONED:
        author = load_author_context(settings.project_root, settings.max_users)

    confirm = (lambda displaced: True) if args.yes else _console_confirm
    ProjectRunner(settings, author=author, confirm=confirm).run()
    return EXIT_OK


def _cmd_init(args: argparse.Namespace) -> int:
    settings = ProjectSettings(Path(args.project).resolve())
    setup_logging(settings)

    if args.max_users is not None:
        settings.events.max_users = args.max_users
    provision_author(
        settings.project_root, args.user_id, settings.max_users, settings.buffer_capacity
    )
    ensure_gitignore(settings.project_root)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return EXIT_ERROR

    try:
        if args.command == "init":
            return _cmd_init(args)
        return _cmd_run(args)
    except ReloadRequired as e:
        logger.warning(str(e))
        return EXIT_RELOAD_REQUIRED
    except OperatorDeclined as e:
        logger.warning(str(e))
        return EXIT_DECLINED
    except GitCompatError as e:
        logger.error(str(e))
        return EXIT_ERROR
    except Exception:
        logger.exception("Unhandled exception in main")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
