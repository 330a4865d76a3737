"""Coalesces bursts of edits to one file into a single deferred check."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass

from serial_guard.watch.scheduler import Clock, Scheduler

DEFAULT_QUIET_PERIOD_MS = 1_000


@dataclass(slots=True)
class PendingFile:
    """Edit state of one path between the first edit and its deferred check."""

    path: str
    last_edit_ms: float
    scheduled: bool = False


class Debouncer:
    """Per-path debounce state machine: Idle -> Scheduled -> Idle.

    The first edit arms one timer for the quiet period. Later edits only move
    the last-edit timestamp; they never arm a second timer. When the timer
    fires and the most recent edit is still inside the quiet period, the check
    is either re-armed for the remaining quiet time or, with
    `reschedule_on_early_fire=False`, dropped for this cycle.

    Re-arming is the default and departs from the older drop-the-cycle
    behaviour; `reschedule_on_early_fire=False` restores it.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        clock: Clock,
        check: Callable[[str], None],
        quiet_period_ms: float = DEFAULT_QUIET_PERIOD_MS,
        *,
        reschedule_on_early_fire: bool = True,
        on_error: Callable[[str, Exception], None] | None = None,
        on_superseded: Callable[[str], None] | None = None,
    ) -> None:
        if quiet_period_ms <= 0:
            raise ValueError("quiet_period_ms must be positive.")
        self._scheduler = scheduler
        self._clock = clock
        self._check = check
        self._quiet_period_ms = quiet_period_ms
        self._reschedule = reschedule_on_early_fire
        self._on_error = on_error
        self._on_superseded = on_superseded
        self._lock = threading.Lock()
        self._pending: dict[str, PendingFile] = {}

    @property
    def quiet_period_ms(self) -> float:
        return self._quiet_period_ms

    def on_edit(self, path: str) -> None:
        """Record an edit; arms a timer only when none is outstanding for the path."""
        now = self._clock()
        with self._lock:
            pending = self._pending.get(path)
            if pending is None:
                pending = PendingFile(path=path, last_edit_ms=now)
                self._pending[path] = pending
            else:
                pending.last_edit_ms = max(pending.last_edit_ms, now)
            if pending.scheduled:
                return
            pending.scheduled = True
        self._scheduler.schedule(self._quiet_period_ms, lambda: self._fire(path))

    def pending_paths(self) -> tuple[str, ...]:
        """Return paths that currently have a timer outstanding."""
        with self._lock:
            return tuple(sorted(path for path, item in self._pending.items() if item.scheduled))

    def _fire(self, path: str) -> None:
        now = self._clock()
        remaining = 0.0
        with self._lock:
            pending = self._pending.get(path)
            if pending is None:
                return
            quiet_for = now - pending.last_edit_ms
            if quiet_for < self._quiet_period_ms:
                if self._reschedule:
                    remaining = self._quiet_period_ms - quiet_for
                else:
                    del self._pending[path]
            else:
                del self._pending[path]

        if remaining > 0:
            self._scheduler.schedule(remaining, lambda: self._fire(path))
            return
        if quiet_for < self._quiet_period_ms:
            if self._on_superseded is not None:
                self._on_superseded(path)
            return
        try:
            self._check(path)
        except Exception as error:
            if self._on_error is None:
                raise
            self._on_error(path, error)
