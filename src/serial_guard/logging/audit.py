"""Structured JSONL audit log utilities."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """One pipeline or action outcome."""

    timestamp: str
    event: str
    path: str | None
    ok: bool
    error_code: str | None = None
    metadata: dict[str, object] = field(default_factory=dict)


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def audit_event(
    event: str,
    path: str | None,
    ok: bool = True,
    error_code: str | None = None,
    **metadata: object,
) -> AuditEvent:
    """Build an event stamped with the current time."""
    return AuditEvent(
        timestamp=utc_timestamp(),
        event=event,
        path=path,
        ok=ok,
        error_code=error_code,
        metadata=dict(sorted(metadata.items())),
    )


class JsonlAuditLogger:
    """Append-only JSONL audit logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append an event as one JSON object per line."""
        line = json.dumps(asdict(event), sort_keys=True, default=str)
        with self._lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)
            handle.write("\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
