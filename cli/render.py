from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_analysis(payload: Dict[str, Any], limit: int = 10) -> None:
    readings = payload.get("sensorData")
    if readings is None:
        typer.echo(payload.get("message", "No data"))
        return

    echo_heading("Analysis")
    echo_key_values(
        [
            ("reading_count", len(readings)),
            ("predicted_temp", payload.get("predicted_temp")),
        ]
    )

    typer.echo()
    echo_heading("Latest Readings")
    if not readings:
        typer.echo("No readings stored.")
        return
    for reading in readings[-limit:]:
        typer.echo(
            f"  - {reading.get('timestamp')}: "
            f"{reading.get('temperature')} deg, door {reading.get('doorStatus')}"
        )


def render_login(payload: Dict[str, Any]) -> None:
    user = payload.get("user") or {}
    echo_heading("Logged In")
    echo_key_values(
        [
            ("id", user.get("id")),
            ("email", user.get("email")),
            ("fullName", user.get("fullName")),
            ("phone", user.get("phone")),
        ]
    )
    typer.echo()
    echo_heading("Token")
    typer.echo(payload.get("token", ""))
