"""Tests for the probe orchestration and the exported gauges."""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from conftest import MutableClock, StubDevice, status_page
from services.prober import ProbeService, build_default_probe_service


def _sample(service: ProbeService, name: str) -> float:
    value = service.metrics.registry.get_sample_value(name)
    assert value is not None, name
    return value


def test_successful_probe_publishes_every_gauge(
    service: ProbeService, device: StubDevice
) -> None:
    device.pages["plug:80"] = status_page()

    outcome = service.probe("plug:80")

    assert outcome.success is True
    assert outcome.duration >= 0
    assert device.calls == ["plug:80"]
    expected = {
        "tasmota_on": 1.0,
        "tasmota_voltage_volts": 237.0,
        "tasmota_current_amperes": 0.053,
        "tasmota_power_watts": 7.0,
        "tasmota_apparent_power_voltamperes": 13.0,
        "tasmota_reactive_power_voltamperesreactive": 10.0,
        "tasmota_power_factor": 0.59,
        "tasmota_today_kwh_total": 0.002,
        "tasmota_yesterday_kwh_total": 0.016,
        "tasmota_kwh_total": 3.334,
        "probe_success": 1.0,
    }
    for name, value in expected.items():
        assert _sample(service, name) == pytest.approx(value), name
    assert math.isnan(_sample(service, "tasmota_daily_last_kwh_total"))
    assert _sample(service, "probe_duration_seconds") == pytest.approx(outcome.duration)


def test_exposition_contains_rendered_samples(
    service: ProbeService, device: StubDevice
) -> None:
    device.pages["plug:80"] = status_page(state="OFF")

    text = service.probe("plug:80").exposition.decode("utf-8")

    assert "tasmota_voltage_volts 237.0" in text
    assert "tasmota_on 0.0" in text
    assert "tasmota_daily_last_kwh_total NaN" in text
    assert "probe_success 1.0" in text


def test_failed_probe_leaves_device_gauges_untouched(
    service: ProbeService, device: StubDevice
) -> None:
    device.pages["good:80"] = status_page(voltage="240")
    service.probe("good:80")

    outcome = service.probe("unreachable:80")

    assert outcome.success is False
    assert outcome.reading is None
    assert _sample(service, "probe_success") == 0.0
    assert _sample(service, "tasmota_voltage_volts") == 240.0
    assert "probe_success 0.0" in outcome.exposition.decode("utf-8")


def test_failed_probe_is_logged_with_reason(
    service: ProbeService, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level("INFO", logger="services.prober"):
        service.probe("unreachable:80")

    warning = next(r for r in caplog.records if r.levelname == "WARNING")
    assert warning.target == "unreachable:80"
    assert warning.reason == "timed out"
    assert any(r.getMessage() == "Probe failed" for r in caplog.records)


def test_empty_target_is_rejected(service: ProbeService) -> None:
    with pytest.raises(ValueError):
        service.probe("")


def test_today_is_zero_forced_at_midnight(
    service: ProbeService, device: StubDevice, clock: MutableClock
) -> None:
    device.pages["plug:80"] = status_page(today="42.42")

    clock.instant = datetime(2024, 7, 26, 23, 59, 15)
    service.probe("plug:80")
    assert _sample(service, "tasmota_today_kwh_total") == 0.0

    clock.instant = datetime(2024, 7, 27, 0, 1, 0)
    service.probe("plug:80")
    assert _sample(service, "tasmota_today_kwh_total") == 42.42


def test_daily_last_emitted_once_per_day(
    service: ProbeService, device: StubDevice, clock: MutableClock
) -> None:
    device.pages["plug:80"] = status_page(today="1.234")

    clock.instant = datetime(2024, 7, 26, 23, 58, 0)
    service.probe("plug:80")
    assert _sample(service, "tasmota_daily_last_kwh_total") == 1.234

    clock.instant = datetime(2024, 7, 26, 23, 59, 0)
    service.probe("plug:80")
    assert math.isnan(_sample(service, "tasmota_daily_last_kwh_total"))
    # The daily-last value is the device value even though today is zero-forced.
    assert _sample(service, "tasmota_today_kwh_total") == 0.0

    clock.instant = datetime(2024, 7, 27, 23, 58, 0)
    service.probe("plug:80")
    assert _sample(service, "tasmota_daily_last_kwh_total") == 1.234


def test_daily_last_never_leaks_between_targets(
    service: ProbeService, device: StubDevice, clock: MutableClock
) -> None:
    device.pages["plug-a:80"] = status_page(today="5.5")
    device.pages["plug-b:80"] = status_page(today="7.7")
    clock.instant = datetime(2024, 7, 26, 23, 58, 0)

    first_a = service.probe("plug-a:80")
    assert _sample(service, "tasmota_daily_last_kwh_total") == 5.5
    assert "tasmota_daily_last_kwh_total 5.5" in first_a.exposition.decode("utf-8")

    first_b = service.probe("plug-b:80")
    assert _sample(service, "tasmota_daily_last_kwh_total") == 7.7
    assert "tasmota_daily_last_kwh_total 7.7" in first_b.exposition.decode("utf-8")

    clock.instant = datetime(2024, 7, 26, 23, 58, 30)
    second_a = service.probe("plug-a:80")
    assert math.isnan(_sample(service, "tasmota_daily_last_kwh_total"))
    assert "tasmota_daily_last_kwh_total 7.7" not in second_a.exposition.decode("utf-8")


def test_concurrent_probes_render_their_own_values(device: StubDevice) -> None:
    targets = {f"plug-{index}:80": f"{200 + index}" for index in range(8)}
    for target, voltage in targets.items():
        device.pages[target] = status_page(voltage=voltage)
    service = ProbeService(device=device)  # type: ignore[arg-type]

    with ThreadPoolExecutor(max_workers=8) as executor:
        outcomes = dict(
            zip(
                [target for target in targets for _ in range(5)],
                executor.map(service.probe, [target for target in targets for _ in range(5)]),
            )
        )

    for target, outcome in outcomes.items():
        text = outcome.exposition.decode("utf-8")
        assert f"tasmota_voltage_volts {targets[target]}.0" in text


def test_read_returns_snapshot_without_publishing(
    service: ProbeService, device: StubDevice, clock: MutableClock
) -> None:
    device.pages["plug:80"] = status_page(today="42.42")
    clock.instant = datetime(2024, 7, 26, 23, 59, 15)

    snapshot = service.read("plug:80")

    assert snapshot.target == "plug:80"
    assert snapshot.on is True
    assert snapshot.voltage == 237.0
    assert snapshot.today == 0.0
    assert snapshot.device_today == 42.42
    assert snapshot.midnight_window is True
    assert snapshot.observed_at == clock.instant
    assert _sample(service, "tasmota_voltage_volts") == 0.0
    assert service.latches.last_latched("plug:80") is None


def test_shutdown_closes_device(service: ProbeService, device: StubDevice) -> None:
    service.shutdown()

    assert device.closed is True


def test_build_default_probe_service_uses_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    from settings import get_settings

    monkeypatch.setenv("TASMOTA_EXPORTER_FETCH_TIMEOUT", "2.5")
    get_settings.cache_clear()
    build_default_probe_service.cache_clear()
    try:
        service = build_default_probe_service()
        assert service is build_default_probe_service()
        assert service.device._client.timeout.read == 2.5  # type: ignore[attr-defined]
        service.shutdown()
    finally:
        build_default_probe_service.cache_clear()
        get_settings.cache_clear()
