"""Exponential moving average used to damp gusty signals."""

from __future__ import annotations

from typing import Optional

# At roughly one wind event every three seconds this is about two minutes.
DEFAULT_WINDOW = 40


def smooth(average: Optional[float], sample: float, window: int = DEFAULT_WINDOW) -> float:
    """Fold ``sample`` into ``average``; an unset average is seeded by the sample."""
    if window < 1:
        raise ValueError("window must be at least 1")
    if average is None:
        return sample
    return average * (window - 1) / window + sample / window
