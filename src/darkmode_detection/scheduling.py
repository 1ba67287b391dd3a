"""Cancellable deferred calls used to debounce re-detection."""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple


class ScheduledCall(ABC):
    @abstractmethod
    def cancel(self) -> None:
        """Prevent the call from running; no-op once it has run."""


class Scheduler(ABC):
    # True when deferred calls run on the thread that drives the scheduler.
    runs_on_caller_thread = False

    @abstractmethod
    def call_later(self, delay: float, func: Callable[[], None]) -> ScheduledCall:
        ...


class _TimerCall(ScheduledCall):
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler(Scheduler):
    """Runs each deferred call on its own daemon ``threading.Timer``."""

    def call_later(self, delay: float, func: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(delay, func)
        timer.daemon = True
        timer.start()
        return _TimerCall(timer)


class _PolledCall(ScheduledCall):
    def __init__(self, func: Callable[[], None]) -> None:
        self.func = func
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class PolledScheduler(Scheduler):
    """Queues deferred calls until the owner thread polls for them.

    Playwright's sync API must be driven from the thread that created it, so
    the browser watch loop calls :meth:`run_pending` between waits instead of
    letting a timer thread touch the page.
    """

    runs_on_caller_thread = True

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._counter = itertools.count()
        self._queue: List[Tuple[float, int, _PolledCall]] = []

    def call_later(self, delay: float, func: Callable[[], None]) -> ScheduledCall:
        call = _PolledCall(func)
        heapq.heappush(self._queue, (self._clock() + delay, next(self._counter), call))
        return call

    def pending(self) -> int:
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def run_pending(self) -> int:
        """Run every call whose deadline has passed; return how many ran."""

        ran = 0
        now = self._clock()
        while self._queue and self._queue[0][0] <= now:
            _, _, call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            call.func()
            ran += 1
        return ran
