from __future__ import annotations

import logging
import threading
from typing import List

import pytest

from models.records import AlertMessage, Reading, SignalKind
from services.alerts import AlertDeliveryError, RecordingAlertSink
from services.detector import TransitionDetector
from services.digest import NO_DATA_MESSAGE, DigestBuilder
from services.engine import DigestTick, Engine


class EmptySource:
    def query(self, start, end, target):
        return []


class FailingSink:
    def __init__(self) -> None:
        self.attempts: List[AlertMessage] = []

    def send(self, message: AlertMessage) -> None:
        self.attempts.append(message)
        raise AlertDeliveryError("bus unavailable")


def _engine(sink, source=None) -> Engine:
    return Engine(
        detector=TransitionDetector(windy_threshold=8.0),
        digest=DigestBuilder(source or EmptySource()),
        sink=sink,
    )


def _temp(value: float) -> Reading:
    return Reading(kind=SignalKind.temperature, fields={"temp": value}, device="temp.outside")


def test_state_starts_unset() -> None:
    engine = _engine(RecordingAlertSink())

    state = engine.state
    assert state.last_rain_total is None
    assert state.last_outside_temp is None
    assert state.last_outside_humidity is None
    assert state.avg_wind is None


def test_process_forwards_detector_alerts() -> None:
    sink = RecordingAlertSink()
    engine = _engine(sink)

    for value in (2.0, 1.0, -0.5, -1.5):
        engine.process(_temp(value))

    assert [message.subtopic for message in sink.messages] == ["temp"]
    assert engine.state.last_outside_temp == -1.5


def test_state_property_is_a_copy() -> None:
    engine = _engine(RecordingAlertSink())
    engine.process(_temp(3.0))

    snapshot = engine.state
    snapshot.last_outside_temp = -10.0

    assert engine.state.last_outside_temp == 3.0


def test_malformed_event_is_logged_and_skipped(caplog: pytest.LogCaptureFixture) -> None:
    sink = RecordingAlertSink()
    engine = _engine(sink)
    engine.process(_temp(1.0))

    with caplog.at_level(logging.WARNING, logger="services.engine"):
        engine.process(Reading(kind=SignalKind.temperature, fields={"humidity": 50.0}))

    assert "Skipping malformed event" in caplog.text
    engine.process(_temp(-1.0))
    assert [message.subtopic for message in sink.messages] == ["temp"]


def test_digest_tick_sends_digest() -> None:
    sink = RecordingAlertSink()
    engine = _engine(sink)

    engine.process(DigestTick())

    assert sink.messages == [AlertMessage(subtopic="daily", text=NO_DATA_MESSAGE, interval=0)]


def test_sink_failures_do_not_escape(caplog: pytest.LogCaptureFixture) -> None:
    sink = FailingSink()
    engine = _engine(sink)

    with caplog.at_level(logging.ERROR, logger="services.engine"):
        engine.process(DigestTick())

    assert len(sink.attempts) == 1
    assert "Alert delivery failed" in caplog.text


def test_unexpected_errors_are_contained(caplog: pytest.LogCaptureFixture) -> None:
    class BrokenSource:
        def query(self, start, end, target):
            raise RuntimeError("boom")

    sink = RecordingAlertSink()
    engine = _engine(sink, source=BrokenSource())

    with caplog.at_level(logging.ERROR, logger="services.engine"):
        engine.process(DigestTick())

    assert sink.messages == []
    assert "Unexpected error" in caplog.text


def test_threaded_loop_processes_in_submission_order(stub_source) -> None:
    sink = RecordingAlertSink()
    engine = _engine(sink, source=stub_source({"max": 12.0, "min": 5.0}))
    engine.start()
    try:
        engine.submit(Reading(kind=SignalKind.rain, fields={"all_total": 10.0}))
        engine.submit(Reading(kind=SignalKind.rain, fields={"all_total": 10.5, "day_total": 0.5}))
        engine.tick()
        engine.submit(Reading(kind=SignalKind.rain, fields={"all_total": "bad"}))
        engine.submit(Reading(kind=SignalKind.rain, fields={"all_total": 11.0, "day_total": 1.0}))
        engine.drain()
    finally:
        engine.stop()

    assert [message.subtopic for message in sink.messages] == ["rain", "daily", "rain"]
    assert sink.messages[2].text == "It's raining! (1.00mm today)"


def test_stop_without_start_is_noop() -> None:
    engine = _engine(RecordingAlertSink())
    engine.stop()


class BlockingSink(RecordingAlertSink):
    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def send(self, message: AlertMessage) -> None:
        self.entered.set()
        self.release.wait(5)
        super().send(message)


def test_stop_keeps_thread_registered_while_it_is_still_busy(stub_source) -> None:
    sink = BlockingSink()
    engine = _engine(sink, source=stub_source({"max": 12.0, "min": 5.0}))
    engine.start()
    engine.tick()
    assert sink.entered.wait(5)

    engine.stop(timeout=0.05)
    busy = engine._thread
    assert busy is not None and busy.is_alive()
    engine.start()
    assert engine._thread is busy

    sink.release.set()
    engine.stop()

    assert engine._thread is None
    assert not busy.is_alive()
    assert [message.subtopic for message in sink.messages] == ["daily"]


def test_malformed_humidity_does_not_drop_temperature(caplog: pytest.LogCaptureFixture) -> None:
    sink = RecordingAlertSink()
    engine = _engine(sink)
    engine.process(Reading(kind=SignalKind.temperature, fields={"temp": 1.0, "humidity": 80.0}))

    with caplog.at_level(logging.WARNING):
        engine.process(
            Reading(kind=SignalKind.temperature, fields={"temp": -2.0, "humidity": "n/a"}, device="temp.outside")
        )

    assert [message.subtopic for message in sink.messages] == ["temp"]
    assert engine.state.last_outside_temp == -2.0
    assert engine.state.last_outside_humidity == 80.0
    assert "Ignoring malformed humidity" in caplog.text
