"""
Centralized configuration for Exam Board.

All hardcoded values that vary by deployment belong here.
Override via environment variables where marked.
"""

import os

# ============================================================
# Clock
# ============================================================

REFERENCE_OFFSET_HOURS: int = int(os.environ.get("EXAM_BOARD_REFERENCE_OFFSET_HOURS", "6"))
"""Hours added to UTC-now to produce the reference instant (Dhaka time, UTC+6)."""

# ============================================================
# Exams
# ============================================================

BATCH_MIN: int = int(os.environ.get("EXAM_BOARD_BATCH_MIN", "47"))
BATCH_MAX: int = int(os.environ.get("EXAM_BOARD_BATCH_MAX", "54"))
"""Inclusive range of batches accepted on create."""

MAX_DURATION_MINUTES: int = int(os.environ.get("EXAM_BOARD_MAX_DURATION_MINUTES", str(7 * 24 * 60)))
"""Longest exam accepted on create or duration change."""

URGENT_THRESHOLD_SECONDS: int = 5 * 60
"""Countdowns below this many seconds are flagged urgent on the dashboard."""

# ============================================================
# Client
# ============================================================

API_BASE_URL: str = os.environ.get("EXAM_BOARD_API_URL", "http://localhost:3000")
"""Base URL the client and CLI talk to."""

HTTP_TIMEOUT_SECONDS: float = float(os.environ.get("EXAM_BOARD_HTTP_TIMEOUT", "10"))

# ============================================================
# Server
# ============================================================

PORT: int = int(os.environ.get("PORT", "3000"))

CORS_ORIGINS: list[str] = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()
]
"""Allowed CORS origins; "*" allows all."""

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
