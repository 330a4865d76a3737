"""Cheap textual gate in front of structural analysis."""

from __future__ import annotations

from collections.abc import Iterable

from serial_guard.qualification.engine import simple_name


class PreFilter:
    """Case-insensitive substring scan for marker simple names.

    A False answer means the text itself names no marker; True only means a
    full analysis might find one. Classes that qualify through a supertype in
    another file are the caller's concern.
    """

    def __init__(self, markers: Iterable[str]) -> None:
        self._tokens = tuple(sorted({simple_name(marker).lower() for marker in markers if marker}))

    @property
    def tokens(self) -> tuple[str, ...]:
        return self._tokens

    def might_qualify(self, text: str) -> bool:
        """Return False only when no marker name occurs in the text."""
        folded = text.lower()
        return any(token in folded for token in self._tokens)
