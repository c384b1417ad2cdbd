"""
Exam record store - parameterized SQL over the exams table.

Every mutating operation addresses rows by natural key
(course_name, exam_no, batch) and affects all rows that match it.
sqlite3 errors are wrapped into StoreError at this boundary.
"""

import logging
import sqlite3
from collections.abc import Callable
from contextlib import AbstractContextManager
from datetime import date, time

from lib import config, db
from lib.errors import NotFoundError, RecordParseError, StoreError, ValidationError
from lib.exam_lifecycle import ExamKey, ExamRecord, compute_interval

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], AbstractContextManager[sqlite3.Connection]]

_KEY_WHERE = "course_name = ? AND exam_no = ? AND batch = ?"


def validate_batch(batch: int) -> None:
    if batch < config.BATCH_MIN or batch > config.BATCH_MAX:
        raise ValidationError(f"Batch must be between {config.BATCH_MIN}-{config.BATCH_MAX}")


def validate_duration(minutes: int) -> None:
    if minutes <= 0:
        raise ValidationError("Duration must be a positive number of minutes")
    if minutes > config.MAX_DURATION_MINUTES:
        raise ValidationError(f"Duration must be at most {config.MAX_DURATION_MINUTES} minutes")


def validate_course_name(course_name: str) -> None:
    # Course names travel as a single URL path segment
    if "/" in course_name:
        raise ValidationError("Course name must not contain '/'")


def validate_schedule(exam_date: date | str, start_time: time | str) -> None:
    """
    Reject a start that cannot be classified later.

    Checked against the longest allowed duration so that any later
    duration change on the row still yields a representable end.
    """
    candidate = ExamRecord("", 0, 0, exam_date, start_time, config.MAX_DURATION_MINUTES)
    try:
        compute_interval(candidate)
    except RecordParseError as e:
        raise ValidationError(f"Exam date/time out of range: {exam_date} {start_time}") from e


def _date_param(value: date | str) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def _time_param(value: time | str) -> str:
    return value.strftime("%H:%M:%S") if isinstance(value, time) else str(value)


class ExamStore:
    """CRUD over the exams table."""

    def __init__(self, connection_factory: ConnectionFactory | None = None):
        self._connect = connection_factory or db.get_connection

    def _execute(self, sql: str, params: tuple = ()) -> int:
        """Run one write statement and return the affected row count."""
        try:
            with self._connect() as conn:
                cursor = conn.execute(sql, params)
                return cursor.rowcount
        except (sqlite3.Error, OverflowError) as e:
            raise StoreError(str(e)) from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_all(self) -> list[ExamRecord]:
        """All exams, ordered by schedule."""
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT course_name, exam_no, batch, exam_date, start_time, duration_minutes "
                    "FROM exams ORDER BY exam_date, start_time"
                ).fetchall()
        except (sqlite3.Error, OverflowError) as e:
            raise StoreError(str(e)) from e
        return [ExamRecord.from_row(row) for row in rows]

    def count(self, key: ExamKey | None = None) -> int:
        sql = "SELECT COUNT(*) FROM exams"
        params: tuple = ()
        if key is not None:
            sql += f" WHERE {_KEY_WHERE}"
            params = tuple(key)
        try:
            with self._connect() as conn:
                return conn.execute(sql, params).fetchone()[0]
        except (sqlite3.Error, OverflowError) as e:
            raise StoreError(str(e)) from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, record: ExamRecord) -> None:
        """Insert a new exam. No existence check: duplicates are allowed."""
        validate_course_name(record.course_name)
        validate_batch(int(record.batch))
        validate_duration(int(record.duration_minutes))
        validate_schedule(record.exam_date, record.start_time)
        self._execute(
            "INSERT INTO exams (course_name, exam_no, exam_date, start_time, duration_minutes, batch) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                record.course_name,
                int(record.exam_no),
                _date_param(record.exam_date),
                _time_param(record.start_time),
                int(record.duration_minutes),
                int(record.batch),
            ),
        )
        logger.info("Created exam %s", record.key)

    def delete(self, key: ExamKey) -> int:
        """Delete every row matching key. Returns rows affected; 0 is not an error."""
        return self._execute(f"DELETE FROM exams WHERE {_KEY_WHERE}", tuple(key))

    def cancel(self, key: ExamKey) -> int:
        deleted = self.delete(key)
        if deleted == 0:
            raise NotFoundError(key)
        logger.info("Cancelled exam %s (%d rows)", key, deleted)
        return deleted

    def reschedule(self, key: ExamKey, new_date: date | str, new_time: time | str) -> int:
        validate_schedule(new_date, new_time)
        updated = self._execute(
            f"UPDATE exams SET exam_date = ?, start_time = ? WHERE {_KEY_WHERE}",
            (_date_param(new_date), _time_param(new_time), *key),
        )
        if updated == 0:
            raise NotFoundError(key)
        logger.info("Rescheduled exam %s to %s %s", key, new_date, new_time)
        return updated

    def change_duration(self, key: ExamKey, new_duration: int) -> int:
        validate_duration(new_duration)
        updated = self._execute(
            f"UPDATE exams SET duration_minutes = ? WHERE {_KEY_WHERE}",
            (new_duration, *key),
        )
        if updated == 0:
            raise NotFoundError(key)
        logger.info("Changed duration of exam %s to %d minutes", key, new_duration)
        return updated
