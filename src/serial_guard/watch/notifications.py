"""Notification value types, sinks and message builders."""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from enum import StrEnum
from pathlib import Path
from typing import Protocol, TextIO

from serial_guard.logging import utc_timestamp


class Severity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Notification:
    """One user-facing message."""

    title: str
    body: str
    severity: Severity
    scope: str


class NotificationSink(Protocol):
    """Fire-and-forget destination for notifications."""

    def publish(self, notification: Notification) -> None:
        """Deliver a notification; the return value is never used."""


class CollectingNotificationSink:
    """Keeps every published notification in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[Notification] = []

    def publish(self, notification: Notification) -> None:
        with self._lock:
            self._items.append(notification)

    @property
    def notifications(self) -> list[Notification]:
        with self._lock:
            return list(self._items)


class StreamNotificationSink:
    """Writes notifications as plain text blocks to a stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def publish(self, notification: Notification) -> None:
        header = f"[{notification.severity.value.upper()}] {notification.title}"
        with self._lock:
            self._stream.write(f"{header}\n{notification.body}\n\n")
            self._stream.flush()


class JsonlNotificationSink:
    """Appends notifications to a JSONL file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def publish(self, notification: Notification) -> None:
        payload = {"timestamp": utc_timestamp(), **asdict(notification)}
        line = json.dumps(payload, sort_keys=True)
        with self._lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)
            handle.write("\n")


class FanOutNotificationSink:
    """Publishes to several sinks in order."""

    def __init__(self, sinks: Iterable[NotificationSink]) -> None:
        self._sinks = tuple(sinks)

    def publish(self, notification: Notification) -> None:
        for sink in self._sinks:
            sink.publish(notification)


_CHECKLIST = (
    "Backward compatibility is maintained",
    "serialVersionUID is updated if needed",
    "Changes are documented",
)


def edit_warning(file_name: str, class_name: str, marker_label: str, scope: str) -> Notification:
    """Warning shown when a qualifying file is edited."""
    lines = [
        f"You modified {file_name} (class: {class_name}) which uses {marker_label}.",
        "Please ensure:",
        *(f"- {item}" for item in _CHECKLIST),
    ]
    return Notification(
        title="Serialization Warning",
        body="\n".join(lines),
        severity=Severity.WARNING,
        scope=scope,
    )


def check_summary(
    file_name: str,
    class_names: list[str],
    marker_label: str,
    scope: str,
) -> Notification:
    """Result of an explicit on-demand check."""
    if not class_names:
        return Notification(
            title="Analysis Complete",
            body=f"File {file_name} does not contain any {marker_label} classes.",
            severity=Severity.INFO,
            scope=scope,
        )
    lines = [f"File {file_name} contains {len(class_names)} {marker_label} class(es):"]
    lines.extend(f"- {name}" for name in class_names)
    lines.append("")
    lines.append("Remember to:")
    lines.extend(f"- {item}" for item in _CHECKLIST)
    return Notification(
        title=f"{marker_label} Classes Found",
        body="\n".join(lines),
        severity=Severity.WARNING,
        scope=scope,
    )


def not_a_source_file(file_name: str, marker_label: str, scope: str) -> Notification:
    return Notification(
        title="Not a Java File",
        body=f"Please choose a Java file to analyze for {marker_label} usage ({file_name}).",
        severity=Severity.WARNING,
        scope=scope,
    )


def check_failed(file_name: str, error: Exception, scope: str) -> Notification:
    return Notification(
        title="Serialization Check Failed",
        body=f"Checking {file_name} failed: {type(error).__name__}: {error}",
        severity=Severity.ERROR,
        scope=scope,
    )
