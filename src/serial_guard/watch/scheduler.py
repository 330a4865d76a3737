"""Delayed-task scheduling, real and simulated."""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

Task = Callable[[], None]
Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Return a monotonic timestamp in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass(slots=True, eq=False)
class ScheduledTask:
    """Handle for one scheduled task."""

    deadline_ms: float
    task: Task
    cancelled: bool = False
    _timer: threading.Timer | None = field(default=None, repr=False)

    def cancel(self) -> None:
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()


class Scheduler(Protocol):
    """Runs a task once after a delay, and tells the time it schedules against."""

    def now(self) -> float:
        """Return the current time in milliseconds."""

    def schedule(self, delay_ms: float, task: Task) -> ScheduledTask:
        """Arrange for `task` to run after `delay_ms`; never blocks."""


class ThreadingScheduler:
    """Scheduler backed by one daemon `threading.Timer` per task."""

    def __init__(self, clock: Clock = monotonic_ms) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._outstanding: set[ScheduledTask] = set()
        self._closed = False

    def now(self) -> float:
        return self._clock()

    def schedule(self, delay_ms: float, task: Task) -> ScheduledTask:
        handle = ScheduledTask(deadline_ms=self._clock() + max(0.0, delay_ms), task=task)

        def run() -> None:
            with self._lock:
                self._outstanding.discard(handle)
            if not handle.cancelled:
                task()

        timer = threading.Timer(max(0.0, delay_ms) / 1000.0, run)
        timer.daemon = True
        handle._timer = timer
        with self._lock:
            if self._closed:
                handle.cancelled = True
                return handle
            self._outstanding.add(handle)
        timer.start()
        return handle

    def pending(self) -> int:
        with self._lock:
            return len(self._outstanding)

    def shutdown(self) -> None:
        """Cancel every outstanding task and refuse new ones."""
        with self._lock:
            self._closed = True
            outstanding = list(self._outstanding)
            self._outstanding.clear()
        for handle in outstanding:
            handle.cancel()


class ManualScheduler:
    """Simulated clock and scheduler; time only moves through `advance`."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = start_ms
        self._queue: list[tuple[float, int, ScheduledTask]] = []
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._now

    def schedule(self, delay_ms: float, task: Task) -> ScheduledTask:
        handle = ScheduledTask(deadline_ms=self._now + max(0.0, delay_ms), task=task)
        with self._lock:
            heapq.heappush(self._queue, (handle.deadline_ms, next(self._sequence), handle))
        return handle

    def pending(self) -> int:
        with self._lock:
            return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, delta_ms: float) -> int:
        """Move time forward, running due tasks in deadline order. Returns tasks run."""
        target = self._now + delta_ms
        ran = 0
        while True:
            with self._lock:
                if not self._queue or self._queue[0][0] > target:
                    break
                deadline, _, handle = heapq.heappop(self._queue)
            self._now = max(self._now, deadline)
            if handle.cancelled:
                continue
            handle.task()
            ran += 1
        self._now = target
        return ran

    def advance_to(self, when_ms: float) -> int:
        """Advance to an absolute time."""
        return self.advance(max(0.0, when_ms - self._now))
