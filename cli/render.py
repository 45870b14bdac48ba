from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable

import typer

_STATUS_COLORS = {
    "green": typer.colors.GREEN,
    "red": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _echo_status(label: str, payload: Dict[str, Any] | None) -> None:
    payload = payload or {}
    status = payload.get("status", "unknown")
    color = _STATUS_COLORS.get(payload.get("color_hint", ""))
    typer.echo(f"{label}: ", nl=False)
    typer.secho(str(status), fg=color, bold=True)


def render_telemetry(payload: Dict[str, Any]) -> None:
    reading = payload.get("reading") or {}
    progress = payload.get("progress") or {}

    echo_heading("Telemetry")
    echo_key_values(
        [
            ("temperature", f"{reading.get('temperature', 0.0):.1f} C"),
            ("humidity", f"{reading.get('humidity', 0.0):.1f} %"),
            ("pulse_rate", f"{reading.get('pulse_rate', 0.0):g} bpm"),
            ("oxygen_rate", f"{reading.get('oxygen_rate', 0.0):g} %"),
            ("spo2", f"{reading.get('spo2', 0.0):g} %"),
            ("received_at", payload.get("received_at")),
        ]
    )

    typer.echo()
    echo_heading("Progress")
    echo_key_values(
        (metric, f"{ratio:.0%}") for metric, ratio in progress.items()
    )

    typer.echo()
    echo_heading("Status")
    _echo_status("pulse_rate", payload.get("pulse_rate_status"))
    _echo_status("spo2", payload.get("spo2_status"))


def _format_timestamp(timestamp_ms: Any) -> str:
    if not isinstance(timestamp_ms, (int, float)):
        return "?"
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def render_message(message: Dict[str, Any]) -> None:
    typer.echo(
        f"[{_format_timestamp(message.get('timestamp'))}] "
        f"{message.get('sender') or 'unknown'}: {message.get('text')}"
    )


def render_messages(messages: Iterable[Dict[str, Any]]) -> None:
    echo_heading("Messages")
    rendered = False
    for message in messages:
        render_message(message)
        rendered = True
    if not rendered:
        typer.echo("No messages yet.")
