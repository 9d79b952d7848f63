"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from models.records import Reading


class ReadingSnapshot(BaseModel):
    """Decoded status page for one target, without touching exported gauges."""

    model_config = ConfigDict(frozen=True)

    target: str
    observed_at: datetime
    on: bool
    voltage: float = Field(..., description="Volts (V).")
    current: float = Field(..., description="Amperes (A).")
    power: float = Field(..., description="Active power in watts (W).")
    apparent_power: float = Field(..., description="Volt-amperes (VA).")
    reactive_power: float = Field(..., description="Volt-amperes reactive (VAr).")
    factor: float
    today: float = Field(
        ..., description="kWh today, forced to 0 inside the midnight window."
    )
    device_today: float = Field(..., description="kWh today as reported by the device.")
    yesterday: float
    total: float
    midnight_window: bool

    @classmethod
    def from_reading(
        cls,
        target: str,
        reading: Reading,
        *,
        observed_at: datetime,
        today: float,
        midnight_window: bool,
    ) -> "ReadingSnapshot":
        return cls(
            target=target,
            observed_at=observed_at,
            on=reading.on,
            voltage=reading.voltage,
            current=reading.current,
            power=reading.power,
            apparent_power=reading.apparent_power,
            reactive_power=reading.reactive_power,
            factor=reading.factor,
            today=today,
            device_today=reading.today,
            yesterday=reading.yesterday,
            total=reading.total,
            midnight_window=midnight_window,
        )
