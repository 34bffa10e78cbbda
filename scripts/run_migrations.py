"""Apply the sandbox schema migrations to a local database.

Waits for the database to accept connections first so the script can run right
after a local Postgres container starts.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from sandbox_seed.db.session import ensure_local_database
from sandbox_seed.logging_config import configure_logging

LOGGER = logging.getLogger("sandbox_seed.migrations")
DEFAULT_TIMEOUT = int(os.getenv("SANDBOX_DB_MIGRATION_TIMEOUT", "60"))
DEFAULT_POLL_INTERVAL = float(os.getenv("SANDBOX_DB_MIGRATION_POLL_INTERVAL", "3"))
SCRIPT_DIR = Path(__file__).resolve().parent
ROOT = SCRIPT_DIR.parent
URL_PLACEHOLDER = "%(SANDBOX_DATABASE_URL)s"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run sandbox schema migrations against a local database.")
    parser.add_argument(
        "--revision",
        default=os.getenv("SANDBOX_DB_MIGRATION_REVISION", "head"),
        help="Revision identifier to upgrade to (default: head).",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds to wait for the database to become available (default: {DEFAULT_TIMEOUT}).",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help=f"Seconds between readiness probes (default: {DEFAULT_POLL_INTERVAL}).",
    )
    parser.add_argument(
        "--config",
        default=str(ROOT / "alembic.ini"),
        help="Path to alembic.ini configuration file.",
    )
    parser.add_argument(
        "--allow-remote",
        action="store_true",
        help="Allow a database host other than localhost or 127.0.0.1.",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Report the current and head revisions without upgrading; exits 1 when behind.",
    )
    return parser.parse_args(argv)


def get_alembic_config(config_path: str) -> Config:
    config = Config(config_path)
    config.set_main_option("script_location", str(ROOT / "alembic"))
    return config


def resolve_database_url(config: Config) -> str:
    url = config.get_main_option("sqlalchemy.url")
    if not url or url == URL_PLACEHOLDER:
        env_url = os.getenv("SANDBOX_DATABASE_URL")
        if env_url:
            config.set_main_option("sqlalchemy.url", env_url.replace("%", "%%"))
            return env_url
        raise RuntimeError("SANDBOX_DATABASE_URL must be set before running migrations.")
    return url


def wait_for_database(database_url: str, *, timeout: int, poll_interval: float) -> None:
    """Probe with ``SELECT 1`` until it succeeds; at least one attempt is always made."""
    deadline = time.monotonic() + timeout
    engine = create_engine(database_url, pool_pre_ping=True)
    last_error: Optional[Exception] = None
    attempt = 0

    try:
        while True:
            attempt += 1
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                LOGGER.info("Database reachable after %d attempt(s).", attempt)
                return
            except OperationalError as exc:
                last_error = exc
                LOGGER.warning("Database not ready (attempt %d): %s", attempt, exc)
            except SQLAlchemyError as exc:
                last_error = exc
                LOGGER.error("Database error during readiness probe: %s", exc)
                break
            if time.monotonic() + poll_interval >= deadline:
                break
            time.sleep(poll_interval)
    finally:
        engine.dispose()

    raise RuntimeError(f"Database did not become ready within {timeout}s.") from last_error


def schema_status(config: Config, database_url: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(current, head)`` revisions; ``current`` is None on an unmigrated database."""
    head = ScriptDirectory.from_config(config).get_current_head()
    engine = create_engine(database_url)
    try:
        with engine.connect() as connection:
            current = MigrationContext.configure(connection).get_current_revision()
    finally:
        engine.dispose()
    return current, head


def run_migrations(
    revision: str,
    *,
    timeout: int,
    poll_interval: float,
    config: Optional[Config] = None,
    allow_remote: bool = False,
) -> None:
    config = config or get_alembic_config(str(ROOT / "alembic.ini"))
    database_url = ensure_local_database(resolve_database_url(config), allow_remote=allow_remote)
    LOGGER.info(
        "Running sandbox migrations up to %s (timeout=%ss poll=%ss)",
        revision,
        timeout,
        poll_interval,
    )
    wait_for_database(database_url, timeout=timeout, poll_interval=poll_interval)
    command.upgrade(config, revision)
    LOGGER.info("Migrations complete.")


def report_status(config: Config, *, allow_remote: bool = False) -> bool:
    database_url = ensure_local_database(resolve_database_url(config), allow_remote=allow_remote)
    current, head = schema_status(config, database_url)
    LOGGER.info("Schema revision: current=%s head=%s", current or "<none>", head)
    return current == head


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging()
    try:
        config = get_alembic_config(args.config)
        if args.status:
            return 0 if report_status(config, allow_remote=args.allow_remote) else 1
        run_migrations(
            args.revision,
            timeout=args.timeout,
            poll_interval=args.poll_interval,
            config=config,
            allow_remote=args.allow_remote,
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Migration run failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
