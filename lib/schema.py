"""
Declarative Schema Definition - THE single source of truth.

Every table and index for Exam Board lives here. Nothing else defines
schema. The schema_engine reads this and creates whatever is missing.

Column definitions use CREATE TABLE syntax. Tables that already exist are
left as they are.
"""

from collections import OrderedDict

# =============================================================================
# Table Definitions
#
# Format: TABLES[name] = {"columns": [(col_name, col_ddl), ...]}
# =============================================================================

TABLES: dict[str, dict] = OrderedDict()

# ---------------------------------------------------------------------------
# exams
# Natural key is (course_name, exam_no, batch) but it is deliberately not
# UNIQUE: duplicates are allowed and are mutated/deleted together.
# ---------------------------------------------------------------------------
TABLES["exams"] = {
    "columns": [
        ("id", "INTEGER PRIMARY KEY AUTOINCREMENT"),
        ("course_name", "TEXT NOT NULL"),
        ("exam_no", "INTEGER NOT NULL"),
        ("batch", "INTEGER NOT NULL"),
        ("exam_date", "TEXT NOT NULL"),  # YYYY-MM-DD
        ("start_time", "TEXT NOT NULL"),  # HH:MM:SS, UTC wall-clock
        ("duration_minutes", "INTEGER NOT NULL"),
        ("created_at", "TEXT NOT NULL DEFAULT (datetime('now'))"),
    ],
}

# =============================================================================
# Indexes
#
# Format: (index_name, table, columns, where_clause_or_None)
# =============================================================================

INDEXES: list[tuple[str, str, str, str | None]] = [
    ("idx_exams_natural_key", "exams", "course_name, exam_no, batch", None),
    ("idx_exams_schedule", "exams", "exam_date, start_time", None),
]
