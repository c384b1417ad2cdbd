"""
Dashboard presenter - client-side bucketing and countdowns.

Fetches the already-reaped exam list and the server reference instant,
classifies each exam with the same rule the server uses, and shows either
the ONGOING or the UPCOMING bucket. Every visible exam gets its own
one-second countdown (to its end when ongoing, to its start when
upcoming). A countdown that reaches zero triggers a full refresh.

Countdowns are presentation state only. Authority is always a fresh
classification against a fresh reference instant, so every render tears
down all timers and starts new ones.

Usage:
    presenter = BucketPresenter(ExamService(), on_render=print_view)
    presenter.refresh()
    presenter.switch_view(ExamStatus.UPCOMING)
    ...
    presenter.close()
"""

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, time

from lib import config
from lib.errors import ExamServiceError
from lib.exam_client import ExamService
from lib.exam_lifecycle import (
    Classification,
    ExamKey,
    ExamRecord,
    ExamStatus,
    classify_all,
    partition,
)

logger = logging.getLogger(__name__)

TICK_MS = 1000

TickCallback = Callable[[ExamKey, int, bool], None]
ExpireCallback = Callable[[ExamKey], None]


def format_remaining_time(ms: int) -> str:
    """
    Render a countdown like "1d : 2h : 3m : 4s".

    Days, hours and minutes appear only when non-zero; seconds always do.
    """
    if ms <= 0:
        return "0s"
    total_seconds = ms // 1000
    days = total_seconds // 86400
    hours = total_seconds % 86400 // 3600
    minutes = total_seconds % 3600 // 60
    seconds = total_seconds % 60

    parts = [
        f"{days}d :" if days > 0 else "",
        f"{hours}h :" if hours > 0 else "",
        f"{minutes}m :" if minutes > 0 else "",
        f"{seconds}s",
    ]
    return " ".join(p for p in parts if p)


def is_urgent(ms: int) -> bool:
    return ms < config.URGENT_THRESHOLD_SECONDS * 1000


# ============================================================
# COUNTDOWNS
# ============================================================


class CountdownTimer:
    """
    Repeating one-second countdown for a single exam.

    tick() is deterministic and can be driven directly; start() runs it on
    a daemon thread until cancel() or expiry.
    """

    def __init__(
        self,
        key: ExamKey,
        target: datetime,
        reference: datetime,
        on_tick: TickCallback,
        on_expire: ExpireCallback,
        interval: float = TICK_MS / 1000,
    ):
        self.key = key
        self.remaining_ms = int((target - reference).total_seconds() * 1000)
        self.interval = interval
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def cancelled(self) -> bool:
        return self._stopped.is_set()

    def tick(self) -> bool:
        """Advance one step. Returns False once the timer is finished."""
        if self.cancelled:
            return False
        if self.remaining_ms <= 0:
            self.cancel()
            self._on_tick(self.key, 0, True)
            self._on_expire(self.key)
            return False
        self._on_tick(self.key, self.remaining_ms, is_urgent(self.remaining_ms))
        self.remaining_ms -= TICK_MS
        return True

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._run, name=f"countdown-{self.key.course_name}", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                if not self.tick():
                    return
            except Exception:
                logger.exception("Countdown for %s failed", self.key)
                self.cancel()
                return

    def cancel(self) -> None:
        self._stopped.set()


class TimerRegistry:
    """Mapping from exam key to its live countdown."""

    def __init__(self):
        self._timers: dict[ExamKey, CountdownTimer] = {}

    def add(self, timer: CountdownTimer) -> None:
        existing = self._timers.pop(timer.key, None)
        if existing is not None:
            existing.cancel()
        self._timers[timer.key] = timer

    def cancel(self, key: ExamKey) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    def __getitem__(self, key: ExamKey) -> CountdownTimer:
        return self._timers[key]

    def __contains__(self, key: object) -> bool:
        return key in self._timers

    def __iter__(self) -> Iterator[ExamKey]:
        return iter(list(self._timers))

    def __len__(self) -> int:
        return len(self._timers)


# ============================================================
# PRESENTER
# ============================================================


@dataclass
class ViewState:
    view: ExamStatus = ExamStatus.ONGOING
    reference: datetime | None = None
    ongoing: list[Classification] = field(default_factory=list)
    upcoming: list[Classification] = field(default_factory=list)

    @property
    def visible(self) -> list[Classification]:
        return self.ongoing if self.view == ExamStatus.ONGOING else self.upcoming


def _noop(*args) -> None:
    return None


class BucketPresenter:
    def __init__(
        self,
        service: ExamService,
        on_render: Callable[[ViewState], None] = _noop,
        on_tick: TickCallback = _noop,
        on_notify: Callable[[str], None] = _noop,
        on_error: Callable[[str], None] = _noop,
        autostart: bool = True,
    ):
        self.service = service
        self.state = ViewState()
        self.timers = TimerRegistry()
        self.on_render = on_render
        self.on_tick = on_tick
        self.on_notify = on_notify
        self.on_error = on_error
        self.autostart = autostart
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Loading + rendering
    # ------------------------------------------------------------------

    def refresh(self) -> bool:
        """Fetch, classify and re-render. Returns False if loading failed."""
        with self._lock:
            try:
                records = self.service.get_all_exams()
                reference = self.service.get_time()
            except ExamServiceError as e:
                logger.error("Load exams failed: %s", e)
                self.on_error("Failed to load exams. Please try again.")
                return False

            buckets = partition(classify_all(records, reference))
            self.state.reference = reference
            self.state.ongoing = buckets[ExamStatus.ONGOING]
            self.state.upcoming = buckets[ExamStatus.UPCOMING]
            if buckets[ExamStatus.EXPIRED]:
                logger.debug("Omitting %d expired exams", len(buckets[ExamStatus.EXPIRED]))
            logger.debug(
                "Ongoing: %d Upcoming: %d", len(self.state.ongoing), len(self.state.upcoming)
            )
            self._render()
            return True

    def _render(self) -> None:
        self.timers.cancel_all()
        for item in self.state.visible:
            timer = CountdownTimer(
                item.key,
                item.countdown_target(),
                self.state.reference,
                on_tick=self.on_tick,
                on_expire=self._handle_expire,
            )
            self.timers.add(timer)
            if self.autostart:
                timer.start()
        self.on_render(self.state)

    def _handle_expire(self, key: ExamKey) -> None:
        if self.state.view == ExamStatus.UPCOMING:
            self.on_notify(f"{key.course_name} exam has started.")
        else:
            self.on_notify(f"{key.course_name} exam has ended.")
        self.refresh()

    def switch_view(self, view: ExamStatus) -> bool:
        if view not in (ExamStatus.ONGOING, ExamStatus.UPCOMING):
            raise ValueError(f"Cannot display {view} exams")
        with self._lock:
            self.timers.cancel_all()
            self.state.view = view
            return self.refresh()

    def close(self) -> None:
        with self._lock:
            self.timers.cancel_all()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _act(self, call: Callable[[], None], success: str, failure: str) -> bool:
        try:
            call()
        except ExamServiceError as e:
            self.on_error(f"{failure}: {e}")
            return False
        self.refresh()
        self.on_notify(success)
        return True

    def create(self, record: ExamRecord) -> bool:
        return self._act(
            lambda: self.service.create_exam(record),
            "Exam created successfully!",
            "Failed to create exam",
        )

    def cancel(self, key: ExamKey) -> bool:
        return self._act(
            lambda: self.service.cancel_exam(key),
            "Exam cancelled successfully!",
            "Failed to cancel exam",
        )

    def reschedule(
        self, key: ExamKey, new_date: date | str | None, new_time: time | str | None
    ) -> bool:
        if self.state.view != ExamStatus.UPCOMING:
            self.on_error("Only upcoming exams can be rescheduled")
            return False
        if not new_date or not new_time:
            self.on_error("Please enter both date and time")
            return False
        return self._act(
            lambda: self.service.reschedule_exam(key, new_date, new_time),
            "Exam rescheduled successfully!",
            "Failed to reschedule exam",
        )

    def change_duration(self, key: ExamKey, new_duration: int | str | None) -> bool:
        try:
            minutes = int(new_duration)
        except (TypeError, ValueError):
            minutes = 0
        if minutes <= 0:
            self.on_error("Please enter a valid duration")
            return False
        return self._act(
            lambda: self.service.update_duration(key, minutes),
            "Duration updated successfully!",
            "Failed to update duration",
        )
