from __future__ import annotations

import re
import time
from collections import defaultdict, deque
from threading import Lock
from typing import Callable, Deque, Dict, List, Optional, Tuple

from datastore.series import DataPoint, Series, TimeSeriesError

_SUMMARIZE_RE = re.compile(
    r'^summarize\(sensor\.(?P<sensor>[\w.\-]+)\.(?P<func>min|max|avg),\s*"[^"]*",\s*"(?P=func)"\)$'
)
_OFFSET_RE = re.compile(r"^-(?P<amount>\d+)(?P<unit>s|min|h|d)$")
_UNIT_SECONDS = {"s": 1, "min": 60, "h": 3600, "d": 86400}

_DEFAULT_RETENTION = 7 * 86400


class InMemorySeries:
    """Process-local stand-in for Graphite holding raw sensor samples.

    Only ``summarize`` targets over ``min``/``max``/``avg`` are understood.
    """

    def __init__(
        self,
        retention: int = _DEFAULT_RETENTION,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.retention = retention
        self._clock = clock
        self._samples: Dict[str, Deque[Tuple[int, float]]] = defaultdict(deque)
        self._lock = Lock()

    def record(self, sensor: str, value: float, timestamp: Optional[float] = None) -> None:
        at = int(self._clock() if timestamp is None else timestamp)
        with self._lock:
            samples = self._samples[sensor]
            samples.append((at, value))
            horizon = int(self._clock()) - self.retention
            while samples and samples[0][0] < horizon:
                samples.popleft()

    def query(self, start: str, end: str, target: str) -> List[Series]:
        match = _SUMMARIZE_RE.match(target.strip())
        if match is None:
            raise TimeSeriesError(f"Unsupported target {target!r}.")
        now = int(self._clock())
        begin = self._resolve(start, now)
        until = self._resolve(end, now)

        with self._lock:
            values = [
                value
                for at, value in self._samples.get(match["sensor"], ())
                if begin <= at <= until
            ]
        if not values:
            return []

        func = match["func"]
        if func == "min":
            result = min(values)
        elif func == "max":
            result = max(values)
        else:
            result = sum(values) / len(values)
        return [Series(target=target, datapoints=[DataPoint(timestamp=begin, value=result)])]

    @staticmethod
    def _resolve(offset: str, now: int) -> int:
        candidate = offset.strip()
        if candidate == "now":
            return now
        match = _OFFSET_RE.match(candidate)
        if match is None:
            raise TimeSeriesError(f"Unsupported time offset {offset!r}.")
        return now - int(match["amount"]) * _UNIT_SECONDS[match["unit"]]
