"""Engine and session helpers for the seeded relational schema."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, sessionmaker

from ..config import Settings, get_settings
from ..errors import UnsafeDatabaseError

LOCAL_HOSTS = ("localhost", "127.0.0.1")

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker[Session]] = None


def ensure_local_database(database_url: Optional[str], *, allow_remote: bool = False) -> str:
    """Refuse to touch anything but a local database unless explicitly allowed."""
    if not database_url:
        raise UnsafeDatabaseError("SANDBOX_DATABASE_URL must be configured before seeding.")
    if allow_remote:
        return database_url
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return database_url
    if url.host not in LOCAL_HOSTS:
        raise UnsafeDatabaseError(
            f"Refusing to seed non-local database host {url.host!r}; "
            "SANDBOX_DATABASE_URL must point at localhost or 127.0.0.1."
        )
    return database_url


def _engine_options(url: URL, settings: Settings) -> dict[str, object]:
    options: dict[str, object] = {"echo": settings.database_echo, "pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
    return options


def get_engine() -> Engine:
    """Build the seed engine on first use; the local-database guard runs first."""
    global _engine, _session_factory
    if _engine is None:
        settings = get_settings()
        url = make_url(
            ensure_local_database(settings.database_url, allow_remote=settings.allow_remote_database)
        )
        _engine = create_engine(url, **_engine_options(url, settings))
        _session_factory = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
        logger.info("Seeding against %s", url.render_as_string(hide_password=True))
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        get_engine()
    assert _session_factory is not None
    return _session_factory


@contextmanager
def session_scope(*, commit: bool = True) -> Generator[Session, None, None]:
    session = get_session_factory()()
    try:
        yield session
        if commit:
            session.commit()
    except Exception:  # noqa: BLE001
        logger.warning("Rolling back seed session")
        session.rollback()
        raise
    finally:
        session.close()


def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


__all__ = [
    "dispose_engine",
    "ensure_local_database",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
