"""Revision-stamped memoization of qualification results."""

from __future__ import annotations

import threading
import weakref
from collections.abc import Callable
from dataclasses import dataclass

from serial_guard.model.types import ClassDeclaration
from serial_guard.qualification.engine import QualificationEngine, QualificationResult


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """Result computed for one declaration at one structural revision."""

    revision: int
    result: QualificationResult


class QualificationCache:
    """Memoizes engine results per declaration until the revision advances.

    Entries are weakly keyed by the declaration object, so they disappear
    together with the declaration and need no separate eviction.
    """

    def __init__(self, engine: QualificationEngine, revision: Callable[[], int]) -> None:
        self._engine = engine
        self._revision = revision
        self._entries: weakref.WeakKeyDictionary[ClassDeclaration, CacheEntry] = (
            weakref.WeakKeyDictionary()
        )
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def engine(self) -> QualificationEngine:
        return self._engine

    def get(self, cls: ClassDeclaration) -> QualificationResult:
        """Return the cached result for the current revision, recomputing when stale."""
        revision = self._revision()
        with self._lock:
            entry = self._entries.get(cls)
            if entry is not None and entry.revision == revision:
                self.hits += 1
                return entry.result
            self.misses += 1
        result = self._engine.evaluate(cls)
        with self._lock:
            self._entries[cls] = CacheEntry(revision=revision, result=result)
        return result

    def qualifies(self, cls: ClassDeclaration) -> bool:
        """Shortcut for `get(cls).qualifies`."""
        return self.get(cls).qualifies

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
