from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

_EXPORTED_PREFIXES = ("tasmota_", "probe_")

_READING_FIELDS = (
    ("on", ""),
    ("voltage", "V"),
    ("current", "A"),
    ("power", "W"),
    ("apparent_power", "VA"),
    ("reactive_power", "VAr"),
    ("factor", ""),
    ("today", "kWh"),
    ("yesterday", "kWh"),
    ("total", "kWh"),
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _with_unit(value: Any, unit: str) -> str:
    return f"{value} {unit}" if unit else f"{value}"


def render_reading(payload: Dict[str, Any]) -> None:
    echo_heading("Reading")
    meta_pairs = [
        ("target", payload.get("target")),
        ("observed_at", payload.get("observed_at")),
    ]
    echo_key_values([(key, value) for key, value in meta_pairs if value is not None])
    echo_key_values(
        (field, _with_unit(payload.get(field), unit)) for field, unit in _READING_FIELDS
    )

    if payload.get("midnight_window"):
        typer.echo()
        typer.secho(
            f"Midnight window active; device reported today={payload.get('device_today')} kWh.",
            fg=typer.colors.YELLOW,
        )


def exported_samples(exposition: str) -> list[str]:
    """Sample lines of the exporter's own metrics, without HELP/TYPE comments."""
    return [
        line
        for line in exposition.splitlines()
        if line.startswith(_EXPORTED_PREFIXES)
    ]


def render_exposition(exposition: str) -> None:
    samples = exported_samples(exposition)
    echo_heading("Metrics")
    if not samples:
        typer.echo("No samples returned.")
        return
    for line in samples:
        typer.echo(line)
