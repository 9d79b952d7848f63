"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Reading:
    """A single decoded snapshot of a plug's status page.

    Energy fields are in kWh as reported by the device clock; ``today`` is the
    raw device value, before any midnight zero-forcing.
    """

    on: bool = False
    voltage: float = 0.0
    current: float = 0.0
    power: float = 0.0
    apparent_power: float = 0.0
    reactive_power: float = 0.0
    factor: float = 0.0
    today: float = 0.0
    yesterday: float = 0.0
    total: float = 0.0
