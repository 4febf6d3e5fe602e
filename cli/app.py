from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import echo_key_values, render_alerts, render_event_result
from datastore.memory_series import InMemorySeries
from services.alerts import RecordingAlertSink
from services.detector import TransitionDetector
from services.digest import DigestBuilder
from services.engine import DigestTick, Engine
from services.ingest import EventIngestor
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the weather-watch service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _parse_fields(pairs: List[str]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {pair!r}.")
        try:
            fields[key] = json.loads(raw)
        except ValueError:
            fields[key] = raw
    return fields


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("event")
def event_command(
    ctx: typer.Context,
    topic: str = typer.Argument(..., help="Bus topic: rain, temp, humidity or wind."),
    device: str = typer.Argument(..., help="Device name the event came from."),
    fields: Optional[List[str]] = typer.Argument(None, help="Event fields as key=value pairs."),
) -> None:
    """Send a sensor event to the service."""
    state = _get_state(ctx)
    payload = state.client.send_event(topic, device, _parse_fields(fields or []))
    render_event_result(payload)


@app.command("digest")
def digest_command(ctx: typer.Context) -> None:
    """Ask the service to send the daily digest now."""
    state = _get_state(ctx)
    state.client.queue_digest()
    typer.secho("Digest queued.", fg=typer.colors.GREEN)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check that the service is up."""
    state = _get_state(ctx)
    echo_key_values(state.client.health().items())


@app.command("replay")
def replay_command(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON-lines file of bus events."
    ),
    digest: bool = typer.Option(
        False,
        "--digest/--no-digest",
        help="Build the daily digest from the replayed temperatures at the end.",
    ),
) -> None:
    """Run recorded events through a local engine and print the alerts."""
    settings = get_settings()
    sink = RecordingAlertSink()
    series = InMemorySeries()
    engine = Engine(
        detector=TransitionDetector(windy_threshold=settings.windy_threshold),
        digest=DigestBuilder(series, sensor=settings.digest_sensor),
        sink=sink,
    )
    ingestor = EventIngestor(engine.process, settings, recorder=series)

    skipped = 0
    with file.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                event = json.loads(line)
                reading = ingestor.ingest(
                    str(event["topic"]), str(event["device"]), event.get("fields") or {}
                )
            except (ValueError, KeyError, TypeError, AttributeError) as exc:
                typer.secho(f"Line {line_number}: invalid event ({exc}).", fg=typer.colors.RED, err=True)
                skipped += 1
                continue
            if reading is None:
                skipped += 1

    if digest:
        engine.process(DigestTick())
    render_alerts(sink.messages, skipped=skipped)
