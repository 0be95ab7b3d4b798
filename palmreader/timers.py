"""
Repeating timers for the edge-scroll action.

Two schedulers share one interface, `call_every(interval, fn) -> TimerHandle`:
`ThreadScheduler` runs each timer on a daemon thread; `ManualScheduler` keeps its
own clock and runs due ticks only when the host calls `advance()` / `run_pending()`.
"""

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# tolerance for float drift when comparing clock readings
CLOCK_SLACK = 1e-9


class TimerHandle:
    """Cancellation handle for one repeating timer. `cancel()` is idempotent."""

    def __init__(self, interval: float):
        self.interval = interval
        self._cancelled = threading.Event()

    @property
    def active(self) -> bool:
        return not self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def wait(self, timeout: float) -> bool:
        return self._cancelled.wait(timeout)


class ThreadScheduler:
    """One daemon thread per timer, stopped through the handle's event."""

    def __init__(self, name: str = "edge-scroll"):
        self.name = name

    def call_every(self, interval: float, fn: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(interval)

        def _run():
            while not handle.wait(interval):
                try:
                    fn()
                except Exception:
                    logger.exception("Timer callback failed")

        threading.Thread(target=_run, name=self.name, daemon=True).start()
        return handle

    def time(self) -> float:
        return time.monotonic()


class ManualScheduler:
    """
    Cooperative scheduler with a virtual clock.
    Ticks only run inside advance() / run_pending(), on the caller's thread.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, TimerHandle, Callable[[], None]]] = []

    def time(self) -> float:
        return self._now

    def call_every(self, interval: float, fn: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = TimerHandle(interval)
        heapq.heappush(self._queue, (self._now + interval, next(self._seq), handle, fn))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h, _ in self._queue if h.active)

    def run_pending(self, now: Optional[float] = None) -> int:
        """Run every tick due at or before `now` (default: the current virtual time)."""
        target = self._now if now is None else now
        fired = 0
        while self._queue and self._queue[0][0] <= target + CLOCK_SLACK:
            due, _, handle, fn = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = max(self._now, due)
            fn()
            fired += 1
            if handle.active:
                heapq.heappush(self._queue, (due + handle.interval, next(self._seq), handle, fn))
        self._now = max(self._now, target)
        return fired

    def advance(self, seconds: float) -> int:
        return self.run_pending(self._now + seconds)
