"""
Reference clock for exam lifecycle decisions.

Exams are stored as wall-clock times and interpreted as UTC. The reference
instant is UTC-now shifted by a fixed offset (Dhaka, UTC+6), still tagged
UTC, so both sides of the comparison share the same frame.
"""

from datetime import UTC, datetime, timedelta

from lib import config


class ClockSource:
    """Supplies the current reference instant."""

    def __init__(self, offset_hours: int | None = None):
        if offset_hours is None:
            offset_hours = config.REFERENCE_OFFSET_HOURS
        self.offset = timedelta(hours=offset_hours)

    def now(self) -> datetime:
        return datetime.now(UTC) + self.offset


class FixedClock(ClockSource):
    """Clock pinned to a single instant. Used by tests and tooling."""

    def __init__(self, instant: datetime):
        super().__init__(offset_hours=0)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def to_iso(instant: datetime) -> str:
    """Render an instant the way the API reports it: millisecond ISO with 'Z'."""
    return instant.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def parse_iso(value: str) -> datetime:
    """Parse an ISO instant reported by the API back into an aware datetime."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    instant = datetime.fromisoformat(value)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


_default_clock: ClockSource | None = None


def get_clock() -> ClockSource:
    """Process-wide clock singleton."""
    global _default_clock  # noqa: PLW0603
    if _default_clock is None:
        _default_clock = ClockSource()
    return _default_clock
