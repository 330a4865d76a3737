from __future__ import annotations

import io
import json
from pathlib import Path

from serial_guard.watch import (
    CollectingNotificationSink,
    FanOutNotificationSink,
    JsonlNotificationSink,
    Severity,
    StreamNotificationSink,
)
from serial_guard.watch.notifications import (
    check_failed,
    check_summary,
    edit_warning,
    not_a_source_file,
)


def test_edit_warning_names_file_class_and_marker() -> None:
    notification = edit_warning("Foo.java", "Foo", "@Autoserializable", "demo")

    assert notification.title == "Serialization Warning"
    assert notification.body.splitlines()[0] == (
        "You modified Foo.java (class: Foo) which uses @Autoserializable."
    )
    assert "serialVersionUID" in notification.body
    assert notification.severity is Severity.WARNING


def test_check_summary_distinguishes_empty_and_found() -> None:
    empty = check_summary("Plain.java", [], "@Autoserializable", "demo")
    found = check_summary("Foo.java", ["Foo", "Bar"], "@Autoserializable", "demo")

    assert empty.title == "Analysis Complete"
    assert empty.severity is Severity.INFO
    assert found.title == "@Autoserializable Classes Found"
    assert found.severity is Severity.WARNING
    assert "contains 2 @Autoserializable class(es)" in found.body
    assert "- Foo" in found.body
    assert "- Bar" in found.body


def test_not_a_source_file_and_failure_messages() -> None:
    not_source = not_a_source_file("README.md", "@Autoserializable", "demo")
    failed = check_failed("Foo.java", ValueError("bad"), "demo")

    assert not_source.title == "Not a Java File"
    assert failed.severity is Severity.ERROR
    assert "ValueError: bad" in failed.body


def test_sinks_deliver_to_stream_file_and_memory(tmp_path: Path) -> None:
    stream = io.StringIO()
    collected = CollectingNotificationSink()
    jsonl = JsonlNotificationSink(tmp_path / "out" / "notifications.jsonl")
    sink = FanOutNotificationSink([StreamNotificationSink(stream), jsonl, collected])

    sink.publish(edit_warning("Foo.java", "Foo", "@Autoserializable", "demo"))

    assert stream.getvalue().startswith("[WARNING] Serialization Warning\n")
    assert len(collected.notifications) == 1
    record = json.loads(jsonl.path.read_text(encoding="utf-8").splitlines()[0])
    assert record["title"] == "Serialization Warning"
    assert record["severity"] == "warning"
    assert record["scope"] == "demo"
    assert isinstance(record["timestamp"], str)
