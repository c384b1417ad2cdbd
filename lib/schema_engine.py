"""
Schema Convergence Engine - create what the declarative schema names.

Reads the declarative schema from lib/schema. Two entry points:

  converge(conn)     - For any DB: creates missing tables and indexes.
  create_fresh(conn) - For new/test DBs: drops everything and creates clean.

Existing tables are never altered or dropped by converge().
"""

import logging
import sqlite3

from lib import schema

logger = logging.getLogger(__name__)


def _get_existing_tables(conn: sqlite3.Connection) -> set[str]:
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row[0] for row in cursor.fetchall()}


def _build_create_sql(table_name: str, table_def: dict) -> str:
    """Build a CREATE TABLE IF NOT EXISTS statement from schema declaration."""
    parts = [f"    {col_name} {col_ddl}" for col_name, col_ddl in table_def["columns"]]
    body = ",\n".join(parts)
    return f"CREATE TABLE IF NOT EXISTS [{table_name}] (\n{body}\n)"


def _create_tables(conn: sqlite3.Connection, existing: set[str], results: dict) -> None:
    for table_name, table_def in schema.TABLES.items():
        if table_name in existing:
            continue
        try:
            conn.execute(_build_create_sql(table_name, table_def))
            results["tables_created"].append(table_name)
            logger.info("schema_engine: created table %s", table_name)
        except sqlite3.OperationalError as e:
            err = f"CREATE TABLE {table_name}: {e}"
            results["errors"].append(err)
            logger.warning("schema_engine: %s", err)


def _create_indexes(conn: sqlite3.Connection, results: dict) -> None:
    for idx_name, idx_table, idx_cols, idx_where in schema.INDEXES:
        where_clause = f" WHERE {idx_where}" if idx_where else ""
        sql = f"CREATE INDEX IF NOT EXISTS [{idx_name}] ON [{idx_table}]({idx_cols}){where_clause}"
        try:
            conn.execute(sql)  # nosec B608
        except sqlite3.OperationalError as e:
            err = f"CREATE INDEX {idx_name}: {e}"
            results["errors"].append(err)
            logger.warning("schema_engine: %s", err)


def converge(conn: sqlite3.Connection) -> dict:
    """
    Create every declared table and index that does not exist yet.

    Returns a results dict for logging.
    """
    results = {"tables_created": [], "errors": []}
    _create_tables(conn, _get_existing_tables(conn), results)
    _create_indexes(conn, results)
    return results


def create_fresh(conn: sqlite3.Connection) -> dict:
    """
    Create all tables from scratch in an empty database.

    Drops ALL existing tables first.  Use only for brand-new databases
    and test fixtures.
    """
    for name in _get_existing_tables(conn):
        if name.startswith("sqlite_"):
            continue
        conn.execute(f"DROP TABLE IF EXISTS [{name}]")  # nosec B608

    results = {"tables_created": [], "errors": []}
    _create_tables(conn, set(), results)
    _create_indexes(conn, results)
    return results
