"""Database utilities for the sandbox seeder."""

from .base import Base
from .session import (
    dispose_engine,
    ensure_local_database,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "Base",
    "dispose_engine",
    "ensure_local_database",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
