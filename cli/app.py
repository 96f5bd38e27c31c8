from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    echo_heading,
    render_average,
    render_history,
    render_reading,
    render_refresh,
)


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the weather station dashboard service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each API request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("refresh")
def refresh_command(ctx: typer.Context) -> None:
    """Pull a fresh reading from the station and record it."""
    state = _get_state(ctx)
    payload = state.client.refresh()
    render_refresh(payload)


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Show the most recent stored reading."""
    state = _get_state(ctx)
    reading = state.client.latest()
    if reading is None:
        typer.echo("No readings recorded yet.")
        return
    echo_heading("Latest Reading")
    render_reading(reading)


@app.command("history")
def history_command(
    ctx: typer.Context,
    hours: Optional[float] = typer.Option(
        None,
        "--hours",
        min=0.01,
        help="Only show readings from the last N hours.",
    ),
) -> None:
    """List stored readings, newest first."""
    state = _get_state(ctx)
    render_history(state.client.history(hours))


@app.command("average")
def average_command(
    ctx: typer.Context,
    hours: float = typer.Option(24.0, "--hours", min=0.01, help="Window length in hours."),
) -> None:
    """Average every measurement over a recent window."""
    state = _get_state(ctx)
    render_average(state.client.average(hours))


@app.command("clear")
def clear_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Delete the stored reading history."""
    state = _get_state(ctx)
    if not yes:
        typer.confirm("Delete all stored readings?", abort=True)
    state.client.clear()
    typer.secho("Historical data cleared.", fg=typer.colors.GREEN)
