"""Typed decoding of raw event fields into per-signal samples."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from models.records import SignalKind

logger = logging.getLogger(__name__)


class FieldDecodeError(ValueError):
    """Raised when an event lacks a required field or carries a bad type."""

    def __init__(self, kind: SignalKind, field: str, reason: str) -> None:
        super().__init__(f"{kind.value} event field {field!r}: {reason}")
        self.kind = kind
        self.field = field
        self.reason = reason


@dataclass(frozen=True, slots=True)
class RainSample:
    all_total: float
    day_total: Optional[float] = None


@dataclass(frozen=True, slots=True)
class TemperatureSample:
    temp: float
    humidity: Optional[float] = None


@dataclass(frozen=True, slots=True)
class HumiditySample:
    humidity: float


@dataclass(frozen=True, slots=True)
class WindSample:
    speed: float


def _as_float(kind: SignalKind, fields: Mapping[str, Any], name: str) -> Optional[float]:
    if name not in fields or fields[name] is None:
        return None
    raw = fields[name]
    # bool is an int subclass but never a valid measurement
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise FieldDecodeError(kind, name, f"expected a number, got {type(raw).__name__}")
    value = float(raw)
    if not math.isfinite(value):
        raise FieldDecodeError(kind, name, "value is not finite")
    return value


def _require_float(kind: SignalKind, fields: Mapping[str, Any], name: str) -> float:
    value = _as_float(kind, fields, name)
    if value is None:
        raise FieldDecodeError(kind, name, "missing")
    return value


def decode_rain(fields: Mapping[str, Any]) -> RainSample:
    kind = SignalKind.rain
    return RainSample(
        all_total=_require_float(kind, fields, "all_total"),
        day_total=_as_float(kind, fields, "day_total"),
    )


def decode_temperature(fields: Mapping[str, Any]) -> TemperatureSample:
    """Decode a temperature event; a malformed humidity is dropped, not fatal."""
    kind = SignalKind.temperature
    temp = _require_float(kind, fields, "temp")
    try:
        humidity = _as_float(kind, fields, "humidity")
    except FieldDecodeError as exc:
        logger.warning(
            "Ignoring malformed humidity: %s",
            exc,
            extra={"signal": kind.value, "field": exc.field, "reason": exc.reason},
        )
        humidity = None
    return TemperatureSample(temp=temp, humidity=humidity)


def decode_humidity(fields: Mapping[str, Any]) -> HumiditySample:
    return HumiditySample(humidity=_require_float(SignalKind.humidity, fields, "humidity"))


def decode_wind(fields: Mapping[str, Any]) -> WindSample:
    return WindSample(speed=_require_float(SignalKind.wind, fields, "speed"))
