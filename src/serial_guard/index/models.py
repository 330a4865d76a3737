"""Typed models for tracked-file state."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class FileRecord:
    """Represents a source file tracked by the change source."""

    path: str
    size: int
    mtime_ns: int
    content_hash: str


@dataclass(slots=True, frozen=True)
class FileDelta:
    """Deterministic change classification between two scans."""

    added: tuple[str, ...]
    updated: tuple[str, ...]
    unchanged: tuple[str, ...]
    removed: tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)
