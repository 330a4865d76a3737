"""Concurrency primitives guarding the structural model."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class RevisionCounter:
    """Thread-safe monotonic counter advanced on every structural mutation."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    @property
    def current(self) -> int:
        return self._value

    def advance(self) -> int:
        """Advance the revision and return the new value."""
        with self._lock:
            self._value += 1
            return self._value


class SnapshotLock:
    """Reentrant shared-read / exclusive-write lock.

    Any number of threads may hold the read side at once; the write side
    excludes every other thread. A thread may re-enter either side, and the
    writing thread may also take reads. A reader may upgrade only when it is
    the sole reader.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers: dict[int, int] = {}
        self._writer: int | None = None
        self._writer_depth = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the shared side for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the exclusive side for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._condition:
            while self._writer is not None and self._writer != me:
                self._condition.wait()
            self._readers[me] = self._readers.get(me, 0) + 1

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._condition:
            remaining = self._readers.get(me, 0) - 1
            if remaining < 0:
                raise RuntimeError("release_read called without a matching acquire_read.")
            if remaining:
                self._readers[me] = remaining
            else:
                del self._readers[me]
            self._condition.notify_all()

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._condition:
            if self._writer == me:
                self._writer_depth += 1
                return
            while self._writer is not None or any(owner != me for owner in self._readers):
                self._condition.wait()
            self._writer = me
            self._writer_depth = 1

    def release_write(self) -> None:
        me = threading.get_ident()
        with self._condition:
            if self._writer != me:
                raise RuntimeError("release_write called by a thread that does not hold the lock.")
            self._writer_depth -= 1
            if self._writer_depth == 0:
                self._writer = None
                self._condition.notify_all()
