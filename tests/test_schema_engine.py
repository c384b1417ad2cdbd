"""
Tests for schema creation and the startup entry point.
"""

import sqlite3

import pytest

import lib.paths
from lib import db, schema, schema_engine


def columns(conn: sqlite3.Connection, table: str) -> list[str]:
    return [row[1] for row in conn.execute(f"PRAGMA table_info([{table}])")]


def indexes(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'index' AND name NOT LIKE 'sqlite_%'"
    )
    return {row[0] for row in rows}


@pytest.fixture
def conn(tmp_path):
    c = sqlite3.connect(str(tmp_path / "converge.db"))
    yield c
    c.close()


class TestConverge:
    def test_creates_missing_table_and_indexes(self, conn):
        results = schema_engine.converge(conn)

        assert results["tables_created"] == ["exams"]
        assert columns(conn, "exams") == [name for name, _ in schema.TABLES["exams"]["columns"]]
        assert {name for name, *_ in schema.INDEXES} <= indexes(conn)

    def test_is_idempotent(self, conn):
        schema_engine.converge(conn)
        second = schema_engine.converge(conn)

        assert second["tables_created"] == []
        assert second["errors"] == []

    def test_existing_rows_survive(self, conn):
        schema_engine.converge(conn)
        conn.execute(
            "INSERT INTO exams (course_name, exam_no, batch, exam_date, start_time, duration_minutes) "
            "VALUES ('CSE-101', 1, 50, '2025-01-10', '09:00:00', 60)"
        )

        schema_engine.converge(conn)

        assert conn.execute("SELECT COUNT(*) FROM exams").fetchone()[0] == 1


class TestCreateFresh:
    def test_drops_existing_tables(self, conn):
        conn.execute("CREATE TABLE leftovers (x INTEGER)")

        schema_engine.create_fresh(conn)

        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        assert "leftovers" not in tables
        assert "exams" in tables


class TestEnsureSchema:
    def test_creates_configured_db(self, tmp_path, monkeypatch):
        target = tmp_path / "nested" / "startup.db"
        monkeypatch.setattr(lib.paths, "db_path", lambda: target)

        results = db.ensure_schema()

        assert results["tables_created"] == ["exams"]
        with db.get_connection() as conn:
            assert db.table_exists(conn, "exams")

    def test_second_run_creates_nothing(self, tmp_path, monkeypatch):
        monkeypatch.setattr(lib.paths, "db_path", lambda: tmp_path / "startup.db")

        db.ensure_schema()
        assert db.ensure_schema()["tables_created"] == []
