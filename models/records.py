"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Mapping, Optional


class SignalKind(str, Enum):
    """Kinds of outdoor signal the engine watches."""

    rain = "rain"
    temperature = "temperature"
    humidity = "humidity"
    wind = "wind"


@dataclass(frozen=True, slots=True)
class Reading:
    """One sensor event, already classified by signal kind."""

    kind: SignalKind
    fields: Mapping[str, Any]
    device: str = ""


@dataclass(frozen=True, slots=True)
class AlertMessage:
    """Outbound alert handed to the alert sink.

    ``interval`` is the suppression window in seconds the sink should apply
    per ``subtopic``; zero means always deliver.
    """

    subtopic: str
    text: str
    interval: int


@dataclass(slots=True)
class RollingState:
    """Last observed values per signal; ``None`` means not observed yet."""

    last_rain_total: Optional[float] = None
    last_outside_temp: Optional[float] = None
    last_outside_humidity: Optional[float] = None
    avg_wind: Optional[float] = None


@dataclass(frozen=True, slots=True)
class DigestWindow:
    """Trailing query window and daily firing grid for the digest."""

    span: timedelta = timedelta(hours=24)
    offset: timedelta = timedelta(hours=8)
    repeat: timedelta = timedelta(hours=24)
