"""Turns event-bus messages into classified readings for the engine."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Any, Callable, Mapping, Optional

from datastore.memory_series import InMemorySeries
from models.records import Reading, SignalKind
from services.engine import build_default_engine, default_memory_series
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

TOPIC_KINDS = {
    "rain": SignalKind.rain,
    "temp": SignalKind.temperature,
    "humidity": SignalKind.humidity,
    "wind": SignalKind.wind,
}


def classify_event(
    topic: str,
    device: str,
    fields: Mapping[str, Any],
    settings: Settings,
) -> Optional[Reading]:
    """Map a bus event to a reading, or ``None`` if it is not watched."""
    kind = TOPIC_KINDS.get(topic)
    if kind is None:
        return None
    watched = {
        SignalKind.rain: settings.rain_device,
        SignalKind.temperature: settings.temp_device,
        SignalKind.humidity: settings.temp_device,
        SignalKind.wind: settings.wind_device,
    }[kind]
    if device != watched:
        return None
    return Reading(kind=kind, fields=dict(fields), device=device)


class EventIngestor:
    """Filters incoming events and forwards watched ones.

    ``forward`` is normally :meth:`Engine.submit`; offline replays pass
    :meth:`Engine.process` to handle each reading inline.

    With the in-memory series backend, outside temperatures are also recorded
    so the digest has something to summarise.
    """

    def __init__(
        self,
        forward: Callable[[Reading], None],
        settings: Settings,
        recorder: Optional[InMemorySeries] = None,
    ) -> None:
        self.forward = forward
        self.settings = settings
        self.recorder = recorder

    def ingest(self, topic: str, device: str, fields: Mapping[str, Any]) -> Optional[Reading]:
        reading = classify_event(topic, device, fields, self.settings)
        if reading is None:
            logger.debug("Ignoring unwatched event", extra={"device": device, "signal": topic})
            return None
        if self.recorder is not None and reading.kind is SignalKind.temperature:
            temp = reading.fields.get("temp")
            if isinstance(temp, (int, float)) and not isinstance(temp, bool) and math.isfinite(temp):
                self.recorder.record(self.settings.digest_sensor, float(temp))
        self.forward(reading)
        return reading


@lru_cache
def build_default_ingestor() -> EventIngestor:
    settings = get_settings()
    recorder = None if settings.graphite_url else default_memory_series()
    return EventIngestor(build_default_engine().submit, settings, recorder=recorder)
