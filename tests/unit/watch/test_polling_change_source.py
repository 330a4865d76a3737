from __future__ import annotations

from pathlib import Path

from serial_guard.config import default_config
from serial_guard.model import StructuralModel
from serial_guard.watch import ChangeEvent, ChangeKind, PollingChangeSource


def _write(root: Path, rel: str, text: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _source(root: Path) -> tuple[PollingChangeSource, StructuralModel]:
    config = default_config(root)
    model = StructuralModel(config.index.include_extensions)
    source = PollingChangeSource(root, config.index, model, skip_prefixes=(".serial_guard",))
    return source, model


def test_prime_loads_sources_into_model(tmp_path: Path) -> None:
    _write(tmp_path, "src/a/Foo.java", "package a;\nclass Foo {}\n")
    _write(tmp_path, "src/a/notes.txt", "class NotTracked {}\n")
    _write(tmp_path, "build/Gen.java", "class Gen {}\n")
    _write(tmp_path, ".serial_guard/Cached.java", "class Cached {}\n")
    source, model = _source(tmp_path)

    assert source.prime() == 1
    assert model.paths() == ("src/a/Foo.java",)
    assert source.poll() == []


def test_poll_reports_created_changed_and_deleted_files(tmp_path: Path) -> None:
    _write(tmp_path, "src/a/Foo.java", "package a;\nclass Foo {}\n")
    _write(tmp_path, "src/a/Old.java", "package a;\nclass Old {}\n")
    source, model = _source(tmp_path)
    source.prime()

    _write(tmp_path, "src/a/Foo.java", "package a;\n@Autoserializable\nclass Foo {}\n")
    _write(tmp_path, "src/a/New.java", "package a;\nclass New {}\n")
    (tmp_path / "src/a/Old.java").unlink()

    events = source.poll()

    assert events == [
        ChangeEvent(path="src/a/Foo.java", kind=ChangeKind.CONTENT_CHANGED),
        ChangeEvent(path="src/a/New.java", kind=ChangeKind.CREATED),
        ChangeEvent(path="src/a/Old.java", kind=ChangeKind.DELETED),
    ]
    assert model.find_class("a.Old") is None
    assert model.find_class("a.New") is not None
    foo = model.find_class("a.Foo")
    assert foo is not None
    assert foo.annotations() == ("Autoserializable",)
    assert source.tracked_count == 2
