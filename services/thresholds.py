"""Descriptive labels for temperature ranges."""

from __future__ import annotations

from typing import NamedTuple, Sequence


class ThresholdEntry(NamedTuple):
    breakpoint: float
    label: str


ThresholdTable = Sequence[ThresholdEntry]

# Describing a daily low.
LOW_TEMPERATURES: tuple[ThresholdEntry, ...] = (
    ThresholdEntry(-5, "a very cold"),
    ThresholdEntry(-2, "a rather cold"),
    ThresholdEntry(0, "a freezing"),
    ThresholdEntry(2, "a frosty"),
    ThresholdEntry(5, "a cold"),
    ThresholdEntry(7, "a moderate"),
    ThresholdEntry(10, "a pleasant"),
    ThresholdEntry(15, "a hot"),
    ThresholdEntry(25, "a scorching"),
)

# Describing a daily high.
HIGH_TEMPERATURES: tuple[ThresholdEntry, ...] = (
    ThresholdEntry(1, "a very cold"),
    ThresholdEntry(4, "a rather cold"),
    ThresholdEntry(6, "a piercing"),
    ThresholdEntry(8, "a chilly"),
    ThresholdEntry(11, "a cool"),
    ThresholdEntry(15, "a moderate"),
    ThresholdEntry(18, "a reasonably warm"),
    ThresholdEntry(21, "a hot"),
    ThresholdEntry(31, "a scorching"),
    ThresholdEntry(36, "a sweltering"),
)


def describe(value: float, table: ThresholdTable) -> str:
    """Return the label of the first breakpoint above ``value``.

    An empty string means the value is at or beyond the last breakpoint and
    no description is available.
    """
    for entry in table:
        if value < entry.breakpoint:
            return entry.label
    return ""
