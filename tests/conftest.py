from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

import pytest

from services.clock import Clock
from services.device_client import DeviceFetchError
from services.prober import ProbeService


def status_page(
    *,
    voltage: str = "237",
    current: str = "0.053",
    power: str = "7",
    apparent_power: str = "13",
    reactive_power: str = "10",
    factor: str = "0.59",
    today: str = "0.002",
    yesterday: str = "0.016",
    total: str = "3.334",
    state: str = "ON",
) -> str:
    """Status fragment as served by a Tasmota plug at ``/?m``."""
    cell = "</td><td style='text-align:left'>"
    unit = "</td><td>&nbsp;</td><td>"
    return (
        "{t}</table><hr/>{t}{s}</th><th></th><th style='text-align:center'><th></th><td>{e}"
        f"{{s}}Voltage{{m}}{cell}{voltage}{unit} V{{e}}"
        f"{{s}}Current{{m}}{cell}{current}{unit} A{{e}}"
        f"{{s}}Active Power{{m}}{cell}{power}{unit} W{{e}}"
        f"{{s}}Apparent Power{{m}}{cell}{apparent_power}{unit} VA{{e}}"
        f"{{s}}Reactive Power{{m}}{cell}{reactive_power}{unit} VAr{{e}}"
        f"{{s}}Power Factor{{m}}{cell}{factor}{unit}                         {{e}}"
        f"{{s}}Energy Today{{m}}{cell}{today}{unit} kWh{{e}}"
        f"{{s}}Energy Yesterday{{m}}{cell}{yesterday}{unit} kWh{{e}}"
        f"{{s}}Energy Total{{m}}{cell}{total}{unit} kWh{{e}}"
        "</table><hr/>{t}</table>{t}<tr><td style='width:100%;text-align:center;"
        f"font-weight:bold;font-size:62px'>{state}</td></tr><tr></tr></table>\n\n"
    )


class StubDevice:
    """Serves canned status pages per target; unknown targets fail."""

    def __init__(self, pages: Optional[Dict[str, str]] = None) -> None:
        self.pages: Dict[str, str] = dict(pages or {})
        self.calls: List[str] = []
        self.closed = False

    def fetch_status(self, target: str) -> str:
        self.calls.append(target)
        page = self.pages.get(target)
        if page is None:
            raise DeviceFetchError(target, "timed out")
        return page

    def close(self) -> None:
        self.closed = True


class MutableClock:
    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def __call__(self) -> datetime:
        return self.instant


@pytest.fixture()
def device() -> StubDevice:
    return StubDevice()


@pytest.fixture()
def clock() -> MutableClock:
    return MutableClock(datetime(2024, 7, 26, 10, 0, 0))


@pytest.fixture()
def service(device: StubDevice, clock: Clock) -> ProbeService:
    return ProbeService(device=device, clock=clock)  # type: ignore[arg-type]
