"""Wall-clock source for the day-boundary and daily-latch windows."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Timezone-aware local time; honours the process ``TZ`` setting."""
    return datetime.now().astimezone()

