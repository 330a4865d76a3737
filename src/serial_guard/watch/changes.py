"""File-change events and a polling change source."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from serial_guard.config import IndexConfig
from serial_guard.index import FileRecord, detect_file_delta, discover_files, record_map
from serial_guard.model import StructuralModel


class ChangeKind(StrEnum):
    CREATED = "created"
    CONTENT_CHANGED = "content_changed"
    DELETED = "deleted"


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    """One observed change to a repository-relative path."""

    path: str
    kind: ChangeKind


class PollingChangeSource:
    """Turns periodic scans of the repository into change-event batches.

    The source owns structural mutations: it updates the model before handing
    out the batch, so listeners always analyze the new content.
    """

    def __init__(
        self,
        repo_root: Path,
        index_config: IndexConfig,
        model: StructuralModel,
        skip_prefixes: tuple[str, ...] = (),
    ) -> None:
        self._repo_root = repo_root.resolve()
        self._index_config = index_config
        self._model = model
        self._skip_prefixes = skip_prefixes
        self._records: dict[str, FileRecord] = {}

    @property
    def tracked_count(self) -> int:
        return len(self._records)

    def prime(self) -> int:
        """Load every tracked file into the model without emitting events."""
        self._records = {}
        self.poll()
        return len(self._records)

    def poll(self) -> list[ChangeEvent]:
        """Scan once and return the changes since the previous scan."""
        current = discover_files(
            self._repo_root,
            self._index_config,
            previous_records=self._records,
            skip_prefixes=self._skip_prefixes,
        )
        delta = detect_file_delta(self._records, current)
        events: list[ChangeEvent] = []
        current_map = record_map(current)

        for path in delta.added:
            if self._load(path):
                events.append(ChangeEvent(path=path, kind=ChangeKind.CREATED))
            else:
                current_map.pop(path, None)
        for path in delta.updated:
            if self._load(path):
                events.append(ChangeEvent(path=path, kind=ChangeKind.CONTENT_CHANGED))
            else:
                current_map.pop(path, None)
        for path in delta.removed:
            self._model.remove_file(path)
            events.append(ChangeEvent(path=path, kind=ChangeKind.DELETED))

        self._records = current_map
        events.sort(key=lambda event: (event.path, event.kind.value))
        return events

    def _load(self, path: str) -> bool:
        try:
            text = (self._repo_root / path).read_text(encoding="utf-8", errors="replace")
        except OSError:
            self._model.remove_file(path)
            return False
        return self._model.update_file(path, text)
