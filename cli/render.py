from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

import typer

from models.records import AlertMessage


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_event_result(payload: Dict[str, Any]) -> None:
    if payload.get("accepted"):
        typer.secho(f"Event accepted as {payload.get('signal')}.", fg=typer.colors.GREEN)
    else:
        typer.secho("Event ignored: not from a watched outside device.", fg=typer.colors.YELLOW)


def render_alerts(alerts: Sequence[AlertMessage], skipped: int = 0) -> None:
    echo_heading("Alerts")
    if alerts:
        for alert in alerts:
            interval = f"{alert.interval}s" if alert.interval else "none"
            typer.echo(f"  - [{alert.subtopic}] {alert.text} (suppress: {interval})")
    else:
        typer.echo("No alerts raised.")
    if skipped:
        typer.echo()
        echo_key_values([("ignored_events", skipped)])
