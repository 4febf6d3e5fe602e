"""Shared types for time-series backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol


class TimeSeriesError(RuntimeError):
    """Raised when a time-series backend cannot answer a query."""


@dataclass(frozen=True, slots=True)
class DataPoint:
    timestamp: int
    value: Optional[float]


@dataclass(slots=True)
class Series:
    target: str
    datapoints: List[DataPoint] = field(default_factory=list)


class TimeSeriesSource(Protocol):
    def query(self, start: str, end: str, target: str) -> List[Series]:
        """Evaluate ``target`` between the relative offsets ``start`` and ``end``."""
        ...


def summarize_target(sensor: str, func: str) -> str:
    """Graphite expression collapsing a sensor's ``func`` series to one point."""
    return f'summarize(sensor.{sensor}.{func},"100y","{func}")'
