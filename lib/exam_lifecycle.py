"""
Exam lifecycle: interval computation and time-bucketing.

An exam occupies the closed interval [start, start + duration]. Relative to a
reference instant it is:

    UPCOMING  reference <  start
    ONGOING   start <= reference <= end
    EXPIRED   end <  reference

Stored dates and times are wall-clock values interpreted as UTC. Parsing them
as local time would shift every comparison by the host's offset, so the
combination is always built with an explicit UTC tzinfo.

This module is pure: no I/O, no mutation. The server-side reaper and the
client-side presenter both classify through it.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from enum import StrEnum
from typing import Any, NamedTuple

from lib.errors import RecordParseError

logger = logging.getLogger(__name__)


class ExamStatus(StrEnum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    EXPIRED = "expired"


class ExamKey(NamedTuple):
    """Natural key of an exam: (course_name, exam_no, batch)."""

    course_name: str
    exam_no: int
    batch: int

    def __str__(self) -> str:
        return f"{self.course_name} #{self.exam_no} (batch {self.batch})"


@dataclass(frozen=True)
class ExamRecord:
    """One row of the exams table, as stored."""

    course_name: str
    exam_no: int
    batch: int
    exam_date: Any
    start_time: Any
    duration_minutes: int

    @property
    def key(self) -> ExamKey:
        return ExamKey(self.course_name, int(self.exam_no), int(self.batch))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ExamRecord":
        """Build from a sqlite3.Row or an API JSON object."""
        return cls(
            course_name=row["course_name"],
            exam_no=row["exam_no"],
            batch=row["batch"],
            exam_date=row["exam_date"],
            start_time=row["start_time"],
            duration_minutes=row["duration_minutes"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "course_name": self.course_name,
            "exam_no": self.exam_no,
            "batch": self.batch,
            "exam_date": _date_text(self.exam_date),
            "start_time": _time_text(self.start_time),
            "duration_minutes": self.duration_minutes,
        }


@dataclass(frozen=True)
class Classification:
    """Result of classifying one record against a reference instant."""

    record: ExamRecord
    status: ExamStatus
    start: datetime
    end: datetime

    @property
    def key(self) -> ExamKey:
        return self.record.key

    @property
    def finish_time(self) -> str:
        """Wall-clock end of the exam, HH:MM:SS."""
        return self.end.strftime("%H:%M:%S")

    def countdown_target(self) -> datetime:
        """Instant the dashboard counts down to: end if running, else start."""
        if self.status == ExamStatus.ONGOING:
            return self.end
        return self.start


# ============================================================
# PARSING
# ============================================================


def _date_text(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _time_text(value: Any) -> str:
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, timedelta):
        # Some drivers hand back TIME columns as timedeltas
        total = int(value.total_seconds())
        return f"{total // 3600:02d}:{total % 3600 // 60:02d}:{total % 60:02d}"
    return str(value)


def parse_exam_date(value: Any) -> date:
    """Parse a civil date. Accepts date objects, YYYY-MM-DD and ISO date-times."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError as e:
        raise RecordParseError(f"Unparseable exam_date: {value!r}") from e


def parse_start_time(value: Any) -> time:
    """Parse a time-of-day. Accepts time objects, HH:MM and HH:MM:SS."""
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if isinstance(value, timedelta):
        value = _time_text(value)
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError as e:
        raise RecordParseError(f"Unparseable start_time: {value!r}") from e


# ============================================================
# INTERVAL + CLASSIFICATION
# ============================================================


def compute_interval(record: ExamRecord) -> tuple[datetime, datetime]:
    """
    Return (start_instant, end_instant) for a record, both UTC-aware.

    Raises RecordParseError if the stored date, time or duration is malformed.
    """
    exam_date = parse_exam_date(record.exam_date)
    start_time = parse_start_time(record.start_time)
    try:
        minutes = int(record.duration_minutes)
    except (TypeError, ValueError) as e:
        raise RecordParseError(f"Unparseable duration_minutes: {record.duration_minutes!r}") from e

    try:
        start = datetime.combine(exam_date, start_time, tzinfo=UTC)
        end = start + timedelta(minutes=minutes)
    except (OverflowError, ValueError) as e:
        raise RecordParseError(
            f"Exam interval out of range: {record.exam_date} {record.start_time} "
            f"+ {record.duration_minutes} minutes"
        ) from e
    return start, end


def status_at(start: datetime, end: datetime, reference: datetime) -> ExamStatus:
    """Bucket an interval relative to reference. Both ends count as ONGOING."""
    if reference < start:
        return ExamStatus.UPCOMING
    if reference <= end:
        return ExamStatus.ONGOING
    return ExamStatus.EXPIRED


def classify(record: ExamRecord, reference: datetime) -> Classification:
    """Classify one record. Raises RecordParseError on malformed date/time."""
    start, end = compute_interval(record)
    return Classification(record, status_at(start, end, reference), start, end)


def try_classify(record: ExamRecord, reference: datetime) -> Classification | None:
    """Classify one record, logging and returning None if it cannot be parsed."""
    try:
        return classify(record, reference)
    except RecordParseError as e:
        logger.warning("Skipping exam %s: %s", record.course_name, e)
        return None


def classify_all(records: Iterable[ExamRecord], reference: datetime) -> list[Classification]:
    """Classify every parseable record; malformed ones are dropped."""
    results = []
    for record in records:
        result = try_classify(record, reference)
        if result is not None:
            results.append(result)
    return results


def partition(
    classifications: Iterable[Classification],
) -> dict[ExamStatus, list[Classification]]:
    """Group classifications by status. Every status is present in the result."""
    buckets: dict[ExamStatus, list[Classification]] = {status: [] for status in ExamStatus}
    for item in classifications:
        buckets[item.status].append(item)
    return buckets
