from __future__ import annotations

import logging

from logging_config import ContextualFormatter
from models.records import SignalKind


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("services.engine", logging.WARNING, __file__, 1, "Skipping event", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_known_extras_are_appended() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    line = formatter.format(
        _record(signal=SignalKind.temperature, field="temp", interval=7200, device=None, unrelated="x")
    )

    assert line == "Skipping event | signal=temperature field=temp interval=7200"


def test_plain_message_without_extras() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s", extra_keys=["subtopic"])

    assert formatter.format(_record(signal="rain")) == "WARNING Skipping event"
