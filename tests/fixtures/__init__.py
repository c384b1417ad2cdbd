"""
Test fixtures for deterministic testing.

This module provides:
- fixture_db: Creates temp SQLite databases with pinned seed exams
- exam_seed.json: Pinned exams that define bucket expectations
"""

from .fixture_db import (
    REFERENCE,
    connection_factory,
    create_fixture_db,
    guard_no_live_db,
    insert_raw,
)

__all__ = [
    "REFERENCE",
    "connection_factory",
    "create_fixture_db",
    "guard_no_live_db",
    "insert_raw",
]
