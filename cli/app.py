from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_message, render_messages, render_telemetry


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the vitals feed dashboard service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
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
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between telemetry refreshes for the watch command.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, poll_interval=poll_interval)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show the latest reading with gauge progress and vital statuses."""
    state = _get_state(ctx)
    render_telemetry(state.client.get_telemetry())


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    count: int = typer.Option(10, "--count", "-n", min=1, help="Number of refreshes."),
) -> None:
    """Poll the latest telemetry repeatedly."""
    state = _get_state(ctx)
    for index in range(count):
        if index:
            time.sleep(state.config.poll_interval)
            typer.echo()
        render_telemetry(state.client.get_telemetry())


@app.command("push-reading")
def push_reading_command(
    ctx: typer.Context,
    temperature: Optional[float] = typer.Option(None, help="Temperature in degrees Celsius."),
    humidity: Optional[float] = typer.Option(None, help="Relative humidity in percent."),
    heart_rate: Optional[float] = typer.Option(None, "--heart-rate", help="Pulse rate in bpm."),
    oxygen_rate: Optional[float] = typer.Option(None, "--oxygen-rate", help="Oxygen rate in percent."),
    spo2: Optional[float] = typer.Option(None, "--spo2", help="SpO2 in percent."),
) -> None:
    """Write a sensor record to the feed; omitted metrics are left out of the record."""
    state = _get_state(ctx)
    fields = {
        "temperature": temperature,
        "humidity": humidity,
        "heartRate": heart_rate,
        "oxygenRate": oxygen_rate,
        "SpO2": spo2,
    }
    payload: Dict[str, Any] = {name: value for name, value in fields.items() if value is not None}
    render_telemetry(state.client.put_sensor_data(payload))


@app.command("messages")
def messages_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(None, "--limit", "-l", min=1, help="Maximum number of messages."),
) -> None:
    """List the most recent messages, newest first."""
    state = _get_state(ctx)
    render_messages(state.client.list_messages(limit))


@app.command("send")
def send_command(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Message text."),
) -> None:
    """Send a message to the caregiver channel."""
    state = _get_state(ctx)
    if not text.strip():
        typer.secho("Message cannot be empty.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    message = state.client.send_message(text)
    typer.secho("Message sent successfully.", fg=typer.colors.GREEN)
    render_message(message)
