"""Daily weather digest built from the time-series store."""

from __future__ import annotations

import logging
import math
from typing import Optional

from datastore.series import TimeSeriesError, TimeSeriesSource, summarize_target
from models.records import AlertMessage, DigestWindow
from services.thresholds import HIGH_TEMPERATURES, LOW_TEMPERATURES, describe

logger = logging.getLogger(__name__)

DIGEST_SUBTOPIC = "daily"
NO_DATA_MESSAGE = "Weather: I didn't get any outside temperature data yesterday!"


def _hours(window: DigestWindow) -> str:
    return f"-{int(window.span.total_seconds() // 3600)}h"


class DigestBuilder:
    """Summarises the trailing window's temperature extremes in one sentence."""

    def __init__(
        self,
        source: TimeSeriesSource,
        sensor: str = "garden.temp",
        window: Optional[DigestWindow] = None,
    ) -> None:
        self.source = source
        self.sensor = sensor
        self.window = window or DigestWindow()

    def build(self) -> str:
        highest = self._extreme("max")
        lowest = self._extreme("min")
        if highest is None or lowest is None:
            return NO_DATA_MESSAGE
        return (
            f"Weather: Outside it got up to {_phrase(highest, describe(highest, HIGH_TEMPERATURES))}"
            f" and went down to {_phrase(lowest, describe(lowest, LOW_TEMPERATURES))}"
            " in the last 24 hours."
        )

    def alert(self) -> AlertMessage:
        return AlertMessage(subtopic=DIGEST_SUBTOPIC, text=self.build(), interval=0)

    def _extreme(self, func: str) -> Optional[float]:
        target = summarize_target(self.sensor, func)
        try:
            series = self.source.query(_hours(self.window), "now", target)
        except TimeSeriesError as exc:
            logger.warning(
                "Failed to query temperature %s: %s",
                func,
                exc,
                extra={"target": target},
            )
            return None
        if not series or not series[0].datapoints:
            logger.info("No temperature %s data", func, extra={"target": target})
            return None
        value = series[0].datapoints[0].value
        if value is None or not math.isfinite(value):
            logger.info("No usable temperature %s point", func, extra={"target": target})
            return None
        return value


def _phrase(value: float, label: str) -> str:
    if label:
        return f"{label} {value:.1f}°C"
    return f"{value:.1f}°C"
