"""Single-consumer loop multiplexing sensor readings and digest ticks."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, replace
from datetime import timedelta
from functools import lru_cache
from typing import Optional, Union

from datastore.graphite import GraphiteClient
from datastore.memory_series import InMemorySeries
from datastore.series import TimeSeriesSource
from models.records import AlertMessage, DigestWindow, Reading, RollingState
from services.alerts import AlertDeliveryError, AlertSink, HttpAlertSink, LoggingAlertSink
from services.decoder import FieldDecodeError
from services.detector import TransitionDetector
from services.digest import DigestBuilder
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DigestTick:
    """Scheduler signal; carries no payload."""


class _Stop:
    pass


Item = Union[Reading, DigestTick, _Stop]


class Engine:
    """Owns the rolling state and processes one input at a time.

    Producers call :meth:`submit` and :meth:`tick` from any thread; only the
    loop in :meth:`run` reads the inbox and touches the state, so no locking
    is needed around it.
    """

    def __init__(
        self,
        detector: TransitionDetector,
        digest: DigestBuilder,
        sink: AlertSink,
    ) -> None:
        self.detector = detector
        self.digest = digest
        self.sink = sink
        self._state = RollingState()
        self._inbox: "queue.Queue[Item]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stop_pending = False

    @property
    def state(self) -> RollingState:
        """Copy of the rolling state, for inspection only."""
        return replace(self._state)

    def submit(self, reading: Reading) -> None:
        self._inbox.put(reading)

    def tick(self) -> None:
        self._inbox.put(DigestTick())

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self.run, name="weather-engine", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop after the inputs already queued have been processed."""
        if self._thread is None:
            return
        if not self._stop_pending:
            self._inbox.put(_Stop())
            self._stop_pending = True
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Engine thread still busy after %ss; keeping it registered", timeout)
            return
        self._thread = None
        self._stop_pending = False

    def run(self) -> None:
        while True:
            item = self._inbox.get()
            try:
                if isinstance(item, _Stop):
                    return
                self.process(item)
            finally:
                self._inbox.task_done()

    def drain(self) -> None:
        """Block until every queued input has been processed."""
        self._inbox.join()

    def process(self, item: Union[Reading, DigestTick]) -> None:
        """Handle one input to completion; failures are logged, never raised."""
        try:
            if isinstance(item, DigestTick):
                self._deliver(self.digest.alert())
                return
            try:
                alerts = self.detector.handle(item, self._state)
            except FieldDecodeError as exc:
                logger.warning(
                    "Skipping malformed event: %s",
                    exc,
                    extra={
                        "signal": exc.kind.value,
                        "device": item.device or None,
                        "field": exc.field,
                        "reason": exc.reason,
                    },
                )
                return
            for alert in alerts:
                self._deliver(alert)
        except Exception:
            logger.exception("Unexpected error while processing %r", item)

    def _deliver(self, alert: AlertMessage) -> None:
        try:
            self.sink.send(alert)
        except AlertDeliveryError as exc:
            logger.error(
                "Alert delivery failed: %s",
                exc,
                extra={"subtopic": alert.subtopic, "interval": alert.interval},
            )


def build_default_series() -> TimeSeriesSource:
    """Graphite when configured, otherwise the shared in-memory store."""
    settings = get_settings()
    if settings.graphite_url:
        return GraphiteClient(settings.graphite_url)
    return default_memory_series()


@lru_cache
def default_memory_series() -> InMemorySeries:
    return InMemorySeries()


def build_default_sink() -> AlertSink:
    settings = get_settings()
    if settings.alert_sink_url:
        return HttpAlertSink(settings.alert_sink_url, target=settings.alert_target)
    return LoggingAlertSink(target=settings.alert_target)


@lru_cache
def build_default_engine() -> Engine:
    """Factory that wires the engine from settings."""
    settings = get_settings()
    detector = TransitionDetector(windy_threshold=settings.windy_threshold)
    window = DigestWindow(offset=timedelta(hours=settings.digest_hour))
    digest = DigestBuilder(build_default_series(), sensor=settings.digest_sensor, window=window)
    return Engine(detector=detector, digest=digest, sink=build_default_sink())
