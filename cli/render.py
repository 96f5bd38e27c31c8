from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

# Wire names as returned by the API, with display labels and units.
READING_FIELDS = (
    ("temperature", "temperature", "°C"),
    ("humidity", "humidity", "%"),
    ("pressure", "pressure", "hPa"),
    ("gas", "gas", "kΩ"),
    ("dewPoint", "dew_point", "°C"),
    ("cloudBase", "cloud_base", "m"),
    ("Rain", "rainfall", "mm"),
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_value(value: Any, unit: str) -> str:
    if isinstance(value, (int, float)):
        return f"{value:.2f} {unit}"
    return "n/a"


def render_reading(reading: Dict[str, Any]) -> None:
    echo_key_values([("timestamp", reading.get("timestamp"))])
    echo_key_values(
        (label, _format_value(reading.get(wire), unit)) for wire, label, unit in READING_FIELDS
    )
    if reading.get("isMockData"):
        typer.secho("source: mock", fg=typer.colors.YELLOW)


def render_refresh(payload: Dict[str, Any]) -> None:
    echo_heading("Current Conditions")
    render_reading(payload.get("reading") or {})
    notice = payload.get("notice")
    if notice:
        typer.echo()
        typer.secho(notice, fg=typer.colors.YELLOW)
    if payload.get("persisted") is False:
        typer.secho("Warning: reading was not saved to history.", fg=typer.colors.RED)


def render_history(payload: Dict[str, Any]) -> None:
    hours = payload.get("hours")
    title = f"Readings (last {hours} h)" if hours is not None else "Readings"
    echo_heading(f"{title}: {payload.get('count', 0)}")
    readings = payload.get("readings") or []
    if not readings:
        typer.echo("No readings recorded.")
        return
    for reading in readings:
        marker = " [mock]" if reading.get("isMockData") else ""
        typer.echo(
            f"  - {reading.get('timestamp')}: "
            f"{_format_value(reading.get('temperature'), '°C')}, "
            f"{_format_value(reading.get('humidity'), '%')}, "
            f"{_format_value(reading.get('pressure'), 'hPa')}{marker}"
        )


def render_average(payload: Dict[str, Any]) -> None:
    echo_heading(f"Average over last {payload.get('hours')} h")
    average = payload.get("average")
    if not average:
        typer.echo("No readings in this window.")
        return
    echo_key_values([("samples", average.get("sample_count"))])
    echo_key_values(
        (label, _format_value(average.get(wire), unit)) for wire, label, unit in READING_FIELDS
    )
