"""
Expiry reaper - deletes exams whose end has passed.

Runs as a side effect of every list request rather than on a timer:
fetch all, classify against the reference instant, delete each EXPIRED
record by natural key, return the rest.

The read-then-delete sequence is not transactional. Two overlapping reaps
may both try to delete the same record; the second delete affects zero
rows, which is fine. Records whose date/time cannot be parsed are
neither returned nor deleted.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from lib.clock import ClockSource, get_clock, to_iso
from lib.exam_lifecycle import Classification, ExamStatus, classify_all
from lib.exam_store import ExamStore

logger = logging.getLogger(__name__)


@dataclass
class ReapResult:
    reference: datetime
    kept: list[Classification] = field(default_factory=list)
    expired: list[Classification] = field(default_factory=list)
    rows_deleted: int = 0


class ExpiryReaper:
    def __init__(self, store: ExamStore, clock: ClockSource | None = None):
        self.store = store
        self.clock = clock or get_clock()

    def reap(self) -> ReapResult:
        reference = self.clock.now()
        logger.info("Reaping exams at reference time %s", to_iso(reference))

        result = ReapResult(reference=reference)
        for item in classify_all(self.store.list_all(), reference):
            if item.status == ExamStatus.EXPIRED:
                result.expired.append(item)
            else:
                result.kept.append(item)

        for item in result.expired:
            logger.info(
                "Deleting past exam: %s (ended %s)",
                item.key,
                to_iso(item.end),
            )
            result.rows_deleted += self.store.delete(item.key)

        # Deleting by natural key also removes live duplicates sharing it
        expired_keys = {item.key for item in result.expired}
        collateral = [item for item in result.kept if item.key in expired_keys]
        if collateral:
            logger.warning("Removed %d live exams sharing an expired key", len(collateral))
            result.kept = [item for item in result.kept if item.key not in expired_keys]

        return result
