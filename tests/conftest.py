"""Pytest configuration for test isolation.

Every test gets its own file-backed SQLite database (exported as
``DATABASE_URL``) and a fixed JWT secret. Cached engines are disposed and the
package logger is reset afterwards, so no state leaks between tests.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import dispose_engines, get_session
from sqlalchemy.orm import Session

from split_ledger.logging_setup import reset_logging
from tests.helpers.db import bootstrap_sqlite_db

TEST_JWT_SECRET = "test-secret-for-split-ledger-0123456789abcdef"


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point the app at a per-test database and reset process-wide state after."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SPLIT_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.delenv("SPLIT_API_BASE_URL", raising=False)
    monkeypatch.delenv("SPLIT_TOKEN", raising=False)
    monkeypatch.delenv("SPLIT_LOG_LEVEL", raising=False)
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'ledger.db'}")
    yield
    dispose_engines()
    reset_logging()


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "ledger.db")


@pytest.fixture
def session(database_url: str) -> Iterator[Session]:
    s = get_session(database_url=database_url)
    try:
        yield s
    finally:
        s.close()
