"""Fixed daily timer used to trigger the digest."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def next_fire(now: datetime, offset: timedelta, repeat: timedelta) -> datetime:
    """First instant strictly after ``now`` on the grid midnight + offset + k * repeat."""
    if repeat <= timedelta(0):
        raise ValueError("repeat must be positive")
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    candidate = midnight + offset
    if candidate > now:
        while candidate - repeat > now:
            candidate -= repeat
        return candidate
    periods = (now - candidate) // repeat + 1
    return candidate + periods * repeat


class DailyScheduler:
    """Runs ``callback`` at a fixed offset into each day.

    Missed fires are not replayed: after each fire the next time is computed
    from the current clock.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        offset: timedelta = timedelta(hours=8),
        repeat: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.callback = callback
        self.offset = offset
        self.repeat = repeat
        self._clock = clock
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stopped.clear()
        self._thread = threading.Thread(target=self._run, name="digest-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        last_fire: Optional[datetime] = None
        while not self._stopped.is_set():
            now = self._clock()
            if last_fire is not None and now < last_fire:
                now = last_fire
            fire_at = next_fire(now, self.offset, self.repeat)
            logger.debug("Next digest tick scheduled", extra={"fire_at": fire_at.isoformat()})
            delay = max((fire_at - self._clock()).total_seconds(), 0.0)
            if self._stopped.wait(delay):
                return
            last_fire = fire_at
            self.callback()
