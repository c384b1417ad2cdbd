"""
Test configuration - ensures repo root is in sys.path + live DB guard.

This allows tests to import from top-level packages (lib, api, cli).
Tests must never touch the live database; use tests/fixtures/fixture_db.py.
"""

import sqlite3
import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import lib.*, api.*, cli.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tests.fixtures.fixture_db import (  # noqa: E402
    connection_factory,
    create_fixture_db,
    guard_no_live_db,
)

# =============================================================================
# DETERMINISM GUARD: Block live database access
# =============================================================================

_original_sqlite_connect = sqlite3.connect


def _guarded_sqlite_connect(database, *args, **kwargs):
    """Intercept sqlite3.connect to block live DB access."""
    guard_no_live_db(database)
    return _original_sqlite_connect(database, *args, **kwargs)


@pytest.fixture(autouse=True)
def guard_live_db_access(monkeypatch):
    """Automatically guard all tests against live DB access."""
    monkeypatch.setattr(sqlite3, "connect", _guarded_sqlite_connect)


# =============================================================================
# FIXTURE DB
# =============================================================================


@pytest.fixture
def fixture_db_path(tmp_path):
    """Fresh seeded fixture DB per test (tests mutate it)."""
    db_path = tmp_path / "fixture_test.db"
    conn = create_fixture_db(db_path)
    conn.close()
    return db_path


@pytest.fixture
def exam_store(fixture_db_path):
    """ExamStore bound to the fixture DB."""
    from lib.exam_store import ExamStore

    return ExamStore(connection_factory=connection_factory(fixture_db_path))
