from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "EXAM_BOARD_HOME"
APP_ENV_DB = "EXAM_BOARD_DB"
APP_ENV_UI = "EXAM_BOARD_UI_DIR"


def app_home() -> Path:
    """
    User-writable home for Exam Board.
    Override with EXAM_BOARD_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".exam_board").resolve()


def data_dir() -> Path:
    d = app_home() / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


def db_path() -> Path:
    """
    Canonical DB path for exam_board.

    Resolution order:
    1. EXAM_BOARD_DB env var (explicit override)
    2. ~/.exam_board/data/exam_board.db (default)
    """
    if os.environ.get(APP_ENV_DB):
        return Path(os.environ[APP_ENV_DB]).expanduser().resolve()
    return data_dir() / "exam_board.db"


def ui_dir() -> Path:
    """Directory holding the browser client (index.html and assets)."""
    if os.environ.get(APP_ENV_UI):
        return Path(os.environ[APP_ENV_UI]).expanduser().resolve()
    return app_home() / "ui"
