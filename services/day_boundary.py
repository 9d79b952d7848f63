"""Midnight zero-forcing for the device's "energy today" counter.

The plug resets its own ``Energy Today`` counter on its internal clock, which
is not in step with the scrape. Around local midnight a scrape can still see
yesterday's accumulated value, and a max-per-day query would then attribute
it to the new day. During the two minutes straddling midnight the exported
value is forced to zero instead.
"""

from __future__ import annotations

import logging
from datetime import datetime

logger = logging.getLogger(__name__)

# [23:59:00, 00:00:59]; 00:01:00 is already outside.
_MIDNIGHT_WINDOW = ((23, 59), (0, 0))


def is_midnight_window(now: datetime) -> bool:
    """True for wall-clock 23:59:xx and 00:00:xx, whatever the date."""
    return (now.hour, now.minute) in _MIDNIGHT_WINDOW


def resolve_today(raw_today: float, now: datetime) -> float:
    if is_midnight_window(now):
        logger.info(
            "Midnight transition detected; exporting today as 0",
            extra={"value": raw_today},
        )
        return 0.0
    return raw_today
