"""Command line entry point: ``sandbox-seed seed|check|cleanup``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .check import collect_report, format_report
from .cleanup import cleanup_sandbox_data
from .config import Settings, get_settings
from .db.session import dispose_engine, ensure_local_database, session_scope
from .errors import PacingApiError
from .logging_config import configure_logging
from .pacing_api import PacingApiClient
from .runner import run_seed

LOGGER = logging.getLogger("sandbox_seed.cli")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sandbox-seed",
        description="Seed a LOCAL learning-platform database with sandbox dashboard data.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override SANDBOX_LOG_LEVEL for this run.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed = subparsers.add_parser("seed", help="Clean up old seed data and generate a fresh dataset.")
    seed.add_argument("--days", type=int, default=None, help="Override SANDBOX_DAYS_TO_SEED.")
    seed.add_argument("--students", type=int, default=None, help="Override SANDBOX_STUDENTS_TO_CREATE.")
    seed.add_argument("--random-seed", type=int, default=None, help="Seed for the randomised generators.")

    subparsers.add_parser("check", help="List groups, modules, enrollments, assignments and teachers.")
    subparsers.add_parser("cleanup", help="Delete previously seeded rows and pacing configs.")
    return parser.parse_args(argv)


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {}
    if getattr(args, "days", None) is not None:
        overrides["days_to_seed"] = args.days
    if getattr(args, "students", None) is not None:
        overrides["students_to_create"] = args.students
    if getattr(args, "random_seed", None) is not None:
        overrides["random_seed"] = args.random_seed
    return settings.model_copy(update=overrides) if overrides else settings


def _run_check() -> None:
    with session_scope(commit=False) as session:
        report = collect_report(session)
    for line in format_report(report):
        print(line)


def _run_cleanup(settings: Settings) -> None:
    with session_scope() as session:
        report = cleanup_sandbox_data(session, settings.group_ids)
    LOGGER.info("Cleanup removed %s", report)
    module_ids = [module_id for module_id in settings.module_ids if module_id]
    try:
        PacingApiClient(settings).cleanup(settings.group_ids, module_ids)
    except PacingApiError as exc:
        LOGGER.warning("Pacing cleanup skipped: %s", exc)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        settings = _apply_overrides(get_settings(), args)
        ensure_local_database(settings.database_url, allow_remote=settings.allow_remote_database)
        LOGGER.info("Safety check passed: running against a local database")

        if args.command == "check":
            _run_check()
        elif args.command == "cleanup":
            _run_cleanup(settings)
        else:
            run_seed(settings)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Seed failed: %s", exc)
        return 1
    finally:
        dispose_engine()
    return 0


if __name__ == "__main__":
    sys.exit(main())
