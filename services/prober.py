"""Probe orchestration: fetch, decode, reconcile and publish one target."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from threading import Lock
from typing import Optional

from app.schemas import ReadingSnapshot
from models.records import Reading
from services.clock import Clock, local_now
from services.daily_latch import DailyLatchTracker
from services.day_boundary import is_midnight_window, resolve_today
from services.device_client import DeviceClient, DeviceFetchError
from services.metrics import ProbeMetrics
from services.normalizer import parse_status_page
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeOutcome:
    success: bool
    duration: float
    exposition: bytes
    reading: Optional[Reading] = None


class ProbeService:
    """Holds the shared gauges, the latch map, the device client and the clock.

    One instance is shared by every request. Gauge writes and the exposition
    render for a target happen under a single lock so that a concurrent probe
    of another target can never interleave its values into the response.
    """

    def __init__(
        self,
        device: DeviceClient,
        metrics: ProbeMetrics | None = None,
        latches: DailyLatchTracker | None = None,
        clock: Clock = local_now,
    ) -> None:
        self.device = device
        self.metrics = metrics or ProbeMetrics()
        self.latches = latches or DailyLatchTracker()
        self.clock = clock
        self._publish_lock = Lock()

    def probe(self, target: str) -> ProbeOutcome:
        """Scrape ``target`` once and return the rendered exposition.

        On fetch failure only ``probe_success`` and ``probe_duration_seconds``
        change; the device gauges keep their previous values.
        """
        if not target:
            raise ValueError("Target parameter is missing")

        start_time = time.perf_counter()
        reading: Optional[Reading] = None
        try:
            raw = self.device.fetch_status(target)
        except DeviceFetchError as exc:
            logger.warning(
                "Failed to query tasmota target",
                extra={"target": target, "reason": exc.reason},
            )
        else:
            reading = parse_status_page(raw)

        with self._publish_lock:
            if reading is not None:
                now = self.clock()
                self.metrics.publish_reading(
                    reading,
                    today=resolve_today(reading.today, now),
                    daily_last=self.latches.resolve_daily_last(target, reading.today, now),
                )
            duration = time.perf_counter() - start_time
            success = reading is not None
            self.metrics.publish_probe(success=success, duration=duration)
            exposition = self.metrics.render()

        logger.info(
            "Probe succeeded" if success else "Probe failed",
            extra={"target": target, "duration_s": duration},
        )
        return ProbeOutcome(
            success=success, duration=duration, exposition=exposition, reading=reading
        )

    def read(self, target: str) -> ReadingSnapshot:
        """Fetch and decode ``target`` without publishing or latching anything.

        Raises :class:`DeviceFetchError` when the device cannot be read.
        """
        if not target:
            raise ValueError("Target parameter is missing")

        reading = parse_status_page(self.device.fetch_status(target))
        now = self.clock()
        return ReadingSnapshot.from_reading(
            target,
            reading,
            observed_at=now,
            today=resolve_today(reading.today, now),
            midnight_window=is_midnight_window(now),
        )

    def shutdown(self) -> None:
        """Release the device client's connection pool."""
        self.device.close()


@lru_cache
def build_default_probe_service() -> ProbeService:
    """Factory that wires the probe service from process settings."""
    settings = get_settings()
    return ProbeService(device=DeviceClient(timeout=settings.fetch_timeout))
