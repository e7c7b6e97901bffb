"""Once-per-second tick sources for timed exams.

Callbacks always run on the caller's thread: a ticker never fires on its
own, it is either advanced explicitly or polled by the front end.
"""
import time
from typing import Callable


class Ticker:
    def __init__(self):
        self._callback: Callable[[], object] | None = None

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], object]) -> None:
        self._callback = callback

    def stop(self) -> None:
        self._callback = None

    def _fire(self, count: int) -> int:
        fired = 0
        while fired < count and self._callback is not None:
            self._callback()
            fired += 1
        return fired


class ManualTicker(Ticker):
    """Ticker driven by explicit advance() calls."""

    def advance(self, seconds: int = 1) -> int:
        return self._fire(seconds)


class WallClockTicker(Ticker):
    """Fires one tick per whole wall-clock second elapsed between polls."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self.clock = clock
        self._anchor = 0.0

    def start(self, callback: Callable[[], object]) -> None:
        super().start(callback)
        self._anchor = self.clock()

    def poll(self) -> int:
        if not self.running:
            return 0
        due = int(self.clock() - self._anchor)
        fired = self._fire(due)
        self._anchor += fired
        return fired
