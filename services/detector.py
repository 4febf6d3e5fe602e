"""Edge-triggered alerting over the rolling sensor state.

Each signal has a pure transition function taking the previously stored
value and the new sample, returning an optional alert together with the
value to store. :class:`TransitionDetector` decodes incoming readings and
composes those functions over a :class:`RollingState` owned by the caller.

Previously stored values of ``None`` mean the signal has not been seen since
start-up: the first observation only seeds the state and never alerts.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from models.records import AlertMessage, Reading, RollingState, SignalKind
from services.decoder import (
    decode_humidity,
    decode_rain,
    decode_temperature,
    decode_wind,
)
from services.smoothing import DEFAULT_WINDOW, smooth

logger = logging.getLogger(__name__)

SUPPRESSION_INTERVAL = 7200
HUMID_THRESHOLD = 96.0
MPH_PER_METRE_PER_SECOND = 2.237

Transition = Tuple[Optional[AlertMessage], Optional[float]]


def rain_transition(
    previous: Optional[float],
    total: float,
    day_total: Optional[float] = None,
) -> Transition:
    """Alert when the cumulative rain total moves up."""
    alert = None
    if previous is not None and total > previous:
        if day_total is None:
            text = "It's raining!"
        else:
            text = f"It's raining! ({day_total:.2f}mm today)"
        alert = AlertMessage(subtopic="rain", text=text, interval=SUPPRESSION_INTERVAL)
    return alert, total


def freezing_transition(previous: Optional[float], temp: float) -> Transition:
    """Alert once when the temperature drops from >= 0 to below zero."""
    alert = None
    if previous is not None and previous >= 0 and temp < 0:
        alert = AlertMessage(
            subtopic="temp",
            text="Brrr, it's gone below zero!",
            interval=SUPPRESSION_INTERVAL,
        )
    return alert, temp


def humidity_transition(previous: Optional[float], humidity: Optional[float]) -> Transition:
    """Alert once when humidity rises through the high-humidity mark.

    A missing sample keeps the previously stored value.
    """
    if humidity is None:
        return None, previous
    alert = None
    if previous is not None and previous < HUMID_THRESHOLD and humidity >= HUMID_THRESHOLD:
        alert = AlertMessage(
            subtopic="humidity",
            text="Looks like rain...",
            interval=SUPPRESSION_INTERVAL,
        )
    return alert, humidity


def wind_transition(
    average: Optional[float],
    speed: float,
    threshold: float,
    window: int = DEFAULT_WINDOW,
) -> Transition:
    """Smooth the wind speed and alert while the average is above ``threshold``.

    Level-triggered; repeats are collapsed by the sink's
    suppression interval.
    """
    seeding = average is None
    updated = smooth(average, speed, window)
    alert = None
    if not seeding and updated > threshold:
        mph = updated * MPH_PER_METRE_PER_SECOND
        alert = AlertMessage(
            subtopic="wind",
            text=f"It's windy outside - {mph:.1f}mph!",
            interval=SUPPRESSION_INTERVAL,
        )
    return alert, updated


class TransitionDetector:
    """Applies the per-signal transitions to a :class:`RollingState`."""

    def __init__(self, windy_threshold: float, window: int = DEFAULT_WINDOW) -> None:
        self.windy_threshold = windy_threshold
        self.window = window

    def handle(self, reading: Reading, state: RollingState) -> List[AlertMessage]:
        """Update ``state`` from ``reading`` and return any alerts.

        Raises :class:`services.decoder.FieldDecodeError` before touching the
        state when the reading is malformed.
        """
        alerts: List[Optional[AlertMessage]] = []

        if reading.kind is SignalKind.rain:
            rain = decode_rain(reading.fields)
            alert, state.last_rain_total = rain_transition(
                state.last_rain_total, rain.all_total, rain.day_total
            )
            alerts.append(alert)
        elif reading.kind is SignalKind.temperature:
            sample = decode_temperature(reading.fields)
            alert, state.last_outside_temp = freezing_transition(
                state.last_outside_temp, sample.temp
            )
            alerts.append(alert)
            alert, state.last_outside_humidity = humidity_transition(
                state.last_outside_humidity, sample.humidity
            )
            alerts.append(alert)
        elif reading.kind is SignalKind.humidity:
            sample = decode_humidity(reading.fields)
            alert, state.last_outside_humidity = humidity_transition(
                state.last_outside_humidity, sample.humidity
            )
            alerts.append(alert)
        elif reading.kind is SignalKind.wind:
            wind = decode_wind(reading.fields)
            alert, state.avg_wind = wind_transition(
                state.avg_wind, wind.speed, self.windy_threshold, self.window
            )
            alerts.append(alert)
        else:  # pragma: no cover - enum is exhaustive
            logger.warning("Ignoring reading of unknown kind", extra={"signal": reading.kind})

        return [alert for alert in alerts if alert is not None]
