"""
Tests for exam interval computation and time-bucketing.

Covers:
- Scenario classification (upcoming / ongoing / expired)
- Inclusive boundaries at both ends of ONGOING
- Explicit UTC interpretation of stored wall-clock values
- Malformed records are skipped and logged, never raised from classify_all
"""

import logging
from datetime import UTC, date, datetime, time, timedelta

import pytest

from lib.errors import RecordParseError
from lib.exam_lifecycle import (
    ExamKey,
    ExamRecord,
    ExamStatus,
    classify,
    classify_all,
    compute_interval,
    parse_exam_date,
    parse_start_time,
    partition,
    status_at,
    try_classify,
)

# =============================================================================
# FIXTURES
# =============================================================================


def make_exam(**overrides) -> ExamRecord:
    fields = {
        "course_name": "CSE-101",
        "exam_no": 1,
        "batch": 50,
        "exam_date": "2025-01-10",
        "start_time": "09:00:00",
        "duration_minutes": 60,
    }
    fields.update(overrides)
    return ExamRecord(**fields)


def at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2025, 1, 10, hour, minute, second, tzinfo=UTC)


# =============================================================================
# SCENARIOS
# =============================================================================


class TestScenario:
    """The canonical 09:00 / 60 minute exam."""

    def test_before_start_is_upcoming(self):
        assert classify(make_exam(), at(8)).status == ExamStatus.UPCOMING

    def test_mid_exam_is_ongoing(self):
        assert classify(make_exam(), at(9, 30)).status == ExamStatus.ONGOING

    def test_after_end_is_expired(self):
        assert classify(make_exam(), at(10, 1)).status == ExamStatus.EXPIRED

    def test_interval_endpoints(self):
        result = classify(make_exam(), at(8))
        assert result.start == at(9)
        assert result.end == at(10)
        assert result.finish_time == "10:00:00"


class TestBoundaries:
    """Both ends of the interval count as ONGOING."""

    def test_reference_equal_to_start_is_ongoing(self):
        assert classify(make_exam(), at(9)).status == ExamStatus.ONGOING

    def test_reference_equal_to_end_is_ongoing(self):
        assert classify(make_exam(), at(10)).status == ExamStatus.ONGOING

    def test_one_millisecond_after_end_is_expired(self):
        reference = at(10) + timedelta(milliseconds=1)
        assert classify(make_exam(), reference).status == ExamStatus.EXPIRED

    def test_one_millisecond_before_start_is_upcoming(self):
        reference = at(9) - timedelta(milliseconds=1)
        assert classify(make_exam(), reference).status == ExamStatus.UPCOMING

    def test_status_at_is_pure_comparison(self):
        assert status_at(at(9), at(10), at(9, 59)) == ExamStatus.ONGOING


class TestInterval:
    """Interval construction from stored date + time + duration."""

    @pytest.mark.parametrize("minutes", [1, 45, 180, 24 * 60])
    def test_end_after_start_for_positive_duration(self, minutes):
        start, end = compute_interval(make_exam(duration_minutes=minutes))
        assert end > start
        assert end - start == timedelta(minutes=minutes)

    def test_start_is_utc_wall_clock(self):
        start, _ = compute_interval(make_exam())
        assert start.utcoffset() == timedelta(0)
        assert (start.hour, start.minute) == (9, 0)

    def test_interval_crossing_midnight(self):
        start, end = compute_interval(make_exam(start_time="23:30:00", duration_minutes=60))
        assert end.date() == date(2025, 1, 11)
        assert end.time() == time(0, 30)

    def test_accepts_short_time_format(self):
        start, _ = compute_interval(make_exam(start_time="09:00"))
        assert start == at(9)

    def test_accepts_native_types(self):
        start, _ = compute_interval(make_exam(exam_date=date(2025, 1, 10), start_time=time(9, 0)))
        assert start == at(9)

    def test_accepts_iso_datetime_date(self):
        assert parse_exam_date("2025-01-10T00:00:00.000Z") == date(2025, 1, 10)

    def test_accepts_timedelta_time(self):
        assert parse_start_time(timedelta(hours=9, minutes=5)) == time(9, 5)


# =============================================================================
# PARSE FAILURES
# =============================================================================


class TestMalformedRecords:
    """Unparseable records never crash a listing."""

    def test_classify_raises_on_bad_date(self):
        with pytest.raises(RecordParseError, match="exam_date"):
            classify(make_exam(exam_date="not-a-date"), at(9))

    def test_classify_raises_on_bad_time(self):
        with pytest.raises(RecordParseError, match="start_time"):
            classify(make_exam(start_time="nine"), at(9))

    def test_try_classify_logs_and_returns_none(self, caplog):
        with caplog.at_level(logging.WARNING, logger="lib.exam_lifecycle"):
            assert try_classify(make_exam(start_time="25:99"), at(9)) is None
        assert "Skipping exam CSE-101" in caplog.text

    @pytest.mark.parametrize(
        "overrides",
        [
            {"exam_date": "9999-12-31", "start_time": "23:30:00"},
            {"duration_minutes": 10**12},
        ],
    )
    def test_end_past_datetime_range_is_a_parse_error(self, overrides):
        with pytest.raises(RecordParseError, match="out of range"):
            compute_interval(make_exam(**overrides))

    def test_classify_all_skips_unrepresentable_end(self):
        records = [make_exam(), make_exam(course_name="FAR", exam_date="9999-12-31", start_time="23:30")]
        results = classify_all(records, at(9, 30))
        assert [r.record.course_name for r in results] == ["CSE-101"]

    def test_classify_all_drops_malformed(self):
        records = [make_exam(), make_exam(course_name="BAD", exam_date="2025-13-40")]
        results = classify_all(records, at(9, 30))
        assert [r.record.course_name for r in results] == ["CSE-101"]


# =============================================================================
# PARTITION
# =============================================================================


class TestPartition:
    def test_every_record_lands_in_exactly_one_bucket(self):
        records = [
            make_exam(course_name="A", start_time="07:00:00", duration_minutes=30),
            make_exam(course_name="B", start_time="09:00:00"),
            make_exam(course_name="C", start_time="11:00:00"),
        ]
        buckets = partition(classify_all(records, at(9, 30)))

        assert set(buckets) == set(ExamStatus)
        assert [c.record.course_name for c in buckets[ExamStatus.EXPIRED]] == ["A"]
        assert [c.record.course_name for c in buckets[ExamStatus.ONGOING]] == ["B"]
        assert [c.record.course_name for c in buckets[ExamStatus.UPCOMING]] == ["C"]
        assert sum(len(v) for v in buckets.values()) == len(records)

    def test_empty_input_yields_empty_buckets(self):
        buckets = partition([])
        assert all(v == [] for v in buckets.values())

    def test_countdown_target_depends_on_status(self):
        ongoing = classify(make_exam(), at(9, 30))
        upcoming = classify(make_exam(), at(8))
        assert ongoing.countdown_target() == at(10)
        assert upcoming.countdown_target() == at(9)


# =============================================================================
# RECORD + KEY
# =============================================================================


class TestExamRecord:
    def test_key_is_typed_natural_key(self):
        record = make_exam(exam_no="2", batch="51")
        assert record.key == ExamKey("CSE-101", 2, 51)
        assert str(record.key) == "CSE-101 #2 (batch 51)"

    def test_from_row_and_to_dict(self):
        row = {
            "course_name": "PHY-120",
            "exam_no": 3,
            "batch": 54,
            "exam_date": "2025-01-10",
            "start_time": "09:15:00",
            "duration_minutes": 120,
            "finish_time": "11:15:00",
        }
        record = ExamRecord.from_row(row)
        assert record.key == ExamKey("PHY-120", 3, 54)
        assert "finish_time" not in record.to_dict()

    def test_to_dict_normalizes_native_types(self):
        record = make_exam(exam_date=date(2025, 1, 10), start_time=time(9, 0))
        data = record.to_dict()
        assert data["exam_date"] == "2025-01-10"
        assert data["start_time"] == "09:00:00"
