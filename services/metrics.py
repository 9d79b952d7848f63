"""Prometheus gauges exported by ``/probe``."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from models.records import Reading


class ProbeMetrics:
    """Owns the registry and the single-slot gauges shared by every target.

    Callers must serialize ``publish_*`` and :meth:`render` across targets;
    :class:`services.prober.ProbeService` does so with one lock.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.on = self._gauge("tasmota_on", "Indicates if the tasmota plug is on/off")
        self.voltage = self._gauge(
            "tasmota_voltage_volts", "voltage of tasmota plug in volt (V)"
        )
        self.current = self._gauge(
            "tasmota_current_amperes", "current of tasmota plug in ampere (A)"
        )
        self.power = self._gauge(
            "tasmota_power_watts", "current power of tasmota plug in watts (W)"
        )
        self.apparent_power = self._gauge(
            "tasmota_apparent_power_voltamperes",
            "apparent power of tasmota plug in volt-amperes (VA)",
        )
        self.reactive_power = self._gauge(
            "tasmota_reactive_power_voltamperesreactive",
            "reactive power of tasmota plug in volt-amperes reactive (VAr)",
        )
        self.factor = self._gauge(
            "tasmota_power_factor", "current power factor of tasmota plug"
        )
        self.today = self._gauge(
            "tasmota_today_kwh_total",
            "todays energy usage total in kilowatts hours (kWh) "
            "[forced to 0 between 23:59:00 and 00:00:59]",
        )
        self.yesterday = self._gauge(
            "tasmota_yesterday_kwh_total",
            "yesterdays energy usage total in kilowatts hours (kWh)",
        )
        self.total = self._gauge(
            "tasmota_kwh_total", "total energy usage in kilowatts hours (kWh)"
        )
        self.daily_last = self._gauge(
            "tasmota_daily_last_kwh_total",
            "The last kWh reading of the day, sent once per day between "
            "23:58:00 and 23:59:59",
        )
        self.probe_success = self._gauge(
            "probe_success", "Displays whether or not the probe was a success"
        )
        self.probe_duration = self._gauge(
            "probe_duration_seconds",
            "Returns how long the probe took to complete in seconds",
        )

    def _gauge(self, name: str, documentation: str) -> Gauge:
        return Gauge(name, documentation, registry=self.registry)

    def publish_reading(self, reading: Reading, *, today: float, daily_last: float) -> None:
        """Write every device gauge.

        ``today`` and ``daily_last`` are passed already resolved, so a NaN
        daily-last always overwrites whatever the previous target left behind.
        """
        self.on.set(1 if reading.on else 0)
        self.voltage.set(reading.voltage)
        self.current.set(reading.current)
        self.power.set(reading.power)
        self.apparent_power.set(reading.apparent_power)
        self.reactive_power.set(reading.reactive_power)
        self.factor.set(reading.factor)
        self.today.set(today)
        self.yesterday.set(reading.yesterday)
        self.total.set(reading.total)
        self.daily_last.set(daily_last)

    def publish_probe(self, *, success: bool, duration: float) -> None:
        self.probe_success.set(1 if success else 0)
        self.probe_duration.set(duration)

    def render(self) -> bytes:
        return generate_latest(self.registry)
