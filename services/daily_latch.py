"""Once-per-day "last reading of the day" latch, tracked per target."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from threading import Lock
from typing import Dict, Optional

logger = logging.getLogger(__name__)

LATCH_HOUR = 23
LATCH_MINUTES = frozenset({58, 59})


def is_latch_window(now: datetime) -> bool:
    """True for wall-clock 23:58:00 through 23:59:59."""
    return now.hour == LATCH_HOUR and now.minute in LATCH_MINUTES


class DailyLatchTracker:
    """Remembers, per target, the calendar date the daily-last value was sent.

    The exported daily-last gauge is a single slot shared by every target, so
    a probe that does not latch must write NaN rather than skip the write.
    :meth:`resolve_daily_last` does the check, the record and the NaN fallback
    in one step.
    """

    def __init__(self) -> None:
        self._latched: Dict[str, date] = {}
        self._lock = Lock()

    def should_latch(self, target: str, now: datetime) -> bool:
        with self._lock:
            return self._is_due(target, now)

    def record_latch(self, target: str, now: datetime) -> None:
        with self._lock:
            self._record(target, now)

    def last_latched(self, target: str) -> Optional[date]:
        with self._lock:
            return self._latched.get(target)

    def resolve_daily_last(self, target: str, today: float, now: datetime) -> float:
        """Return ``today`` exactly once per target per day, NaN otherwise."""
        with self._lock:
            if not self._is_due(target, now):
                return math.nan
            self._record(target, now)
        logger.info(
            "Emitting daily-last value",
            extra={"target": target, "value": today, "latch_date": now.date()},
        )
        return today

    # Callers hold self._lock.
    def _is_due(self, target: str, now: datetime) -> bool:
        if not is_latch_window(now):
            return False
        latched_on = self._latched.get(target)
        if latched_on == now.date():
            logger.debug(
                "Daily-last value already sent today",
                extra={"target": target, "latch_date": latched_on},
            )
            return False
        return True

    def _record(self, target: str, now: datetime) -> None:
        self._latched[target] = now.date()
