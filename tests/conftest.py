from __future__ import annotations

from pathlib import Path

import pytest

from sandbox_seed.config import get_settings
from sandbox_seed.db import models  # noqa: F401
from sandbox_seed.db.base import Base
from sandbox_seed.db.session import dispose_engine, get_engine
from sandbox_seed.telemetry import clear_listeners


@pytest.fixture(autouse=True)
def _reset_state():
    get_settings.cache_clear()
    clear_listeners()
    yield
    clear_listeners()
    dispose_engine()
    get_settings.cache_clear()


@pytest.fixture
def database(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("SANDBOX_DATABASE_URL", f"sqlite:///{tmp_path / 'sandbox.db'}")
    monkeypatch.delenv("SOLVES_COACHING_API_KEY", raising=False)
    get_settings.cache_clear()
    dispose_engine()
    engine = get_engine()
    Base.metadata.create_all(engine)
    yield engine
    dispose_engine()
