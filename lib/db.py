"""
Centralized Database Access for Exam Board.

Single source of truth for:
- DB path resolution
- Connection factory
- Schema creation (delegated to schema_engine)

ALL code must use this module for DB access. No direct sqlite3.connect() elsewhere.
"""

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from lib import paths, schema_engine

logger = logging.getLogger(__name__)

# ============================================================
# DB PATH RESOLUTION
# ============================================================


def get_db_path() -> Path:
    """
    Get the canonical DB path. ALL code must use this.

    Resolution order:
    1. EXAM_BOARD_DB env var (explicit override)
    2. ~/.exam_board/data/exam_board.db (default via paths.db_path())
    """
    return paths.db_path()


# ============================================================
# CONNECTION FACTORY
# ============================================================


@contextmanager
def get_connection(
    row_factory: bool = True,
) -> Generator[sqlite3.Connection, None, None]:
    """
    Get a database connection with proper setup.

    Usage:
        with get_connection() as conn:
            conn.execute(...)
    """
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    if row_factory:
        conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


# ============================================================
# SCHEMA INTROSPECTION
# ============================================================


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    """Check if a table exists."""
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,))
    return cursor.fetchone() is not None


# ============================================================
# STARTUP ENTRY POINT
# ============================================================


def ensure_schema() -> dict:
    """
    Create the exams table and its indexes if missing. Safe to call repeatedly.
    """
    logger.info("Resolved DB path: %s", get_db_path())

    with get_connection() as conn:
        results = schema_engine.converge(conn)

        if results["tables_created"]:
            logger.info("Tables created: %s", results["tables_created"])
        if results["errors"]:
            logger.warning("Schema errors: %s", results["errors"])

        if not table_exists(conn, "exams"):
            logger.error("MISSING exams")

        return results
