"""Per-file cooldown gate for user-visible warnings."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable

from serial_guard.config import DEFAULT_COOLDOWN_MS, clamp_cooldown


class NotificationThrottle:
    """Allows at most one notification per path per cooldown window.

    `cooldown_ms` may be a callable so the current setting is read on every
    decision. `max_entries` bounds the record map with LRU eviction; by default
    it grows for the lifetime of the process.
    """

    def __init__(
        self,
        cooldown_ms: int | Callable[[], int] = DEFAULT_COOLDOWN_MS,
        max_entries: int | None = None,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1 when set.")
        self._cooldown = cooldown_ms
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._last_notified: OrderedDict[str, float] = OrderedDict()

    def cooldown_ms(self) -> int:
        """Return the effective (clamped) cooldown."""
        raw = self._cooldown() if callable(self._cooldown) else self._cooldown
        return clamp_cooldown(raw)

    def should_notify(self, path: str, now: float) -> bool:
        """Return True when no notification was recorded for the path within the cooldown."""
        cooldown = self.cooldown_ms()
        with self._lock:
            return self._allowed(path, now, cooldown)

    def record_notified(self, path: str, now: float) -> None:
        with self._lock:
            self._record(path, now)

    def try_acquire(self, path: str, now: float) -> bool:
        """Atomically check the cooldown and record `now` on success."""
        cooldown = self.cooldown_ms()
        with self._lock:
            if not self._allowed(path, now, cooldown):
                return False
            self._record(path, now)
            return True

    def forget(self, path: str) -> None:
        with self._lock:
            self._last_notified.pop(path, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_notified)

    def _allowed(self, path: str, now: float, cooldown: int) -> bool:
        last = self._last_notified.get(path)
        return last is None or (now - last) >= cooldown

    def _record(self, path: str, now: float) -> None:
        self._last_notified[path] = now
        self._last_notified.move_to_end(path)
        if self._max_entries is not None:
            while len(self._last_notified) > self._max_entries:
                self._last_notified.popitem(last=False)
