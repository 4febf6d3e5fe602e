from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

import pytest

from datastore.series import DataPoint, Series, TimeSeriesError


class StubSource:
    """Answers queries from canned values keyed by aggregation function."""

    def __init__(self, values: Dict[str, Optional[float]], failing: Tuple[str, ...] = ()) -> None:
        self.values = values
        self.failing = failing
        self.calls: List[Tuple[str, str, str]] = []

    def query(self, start: str, end: str, target: str) -> List[Series]:
        self.calls.append((start, end, target))
        func = "max" if '"max"' in target else "min"
        if func in self.failing:
            raise TimeSeriesError("backend unavailable")
        if func not in self.values:
            return []
        return [Series(target=target, datapoints=[DataPoint(timestamp=0, value=self.values[func])])]


@pytest.fixture()
def stub_source() -> Callable[..., StubSource]:
    return StubSource
