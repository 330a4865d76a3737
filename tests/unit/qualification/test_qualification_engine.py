from __future__ import annotations

import pytest

from serial_guard.model import StructuralModel
from serial_guard.qualification import Evidence, QualificationEngine


class StubClass:
    """Hand-built declaration; identity-hashed like model classes."""

    def __init__(
        self,
        name: str,
        annotations: tuple[str, ...] = (),
        interfaces: tuple[str, ...] = (),
        parent: StubClass | None = None,
    ) -> None:
        self.name = name.rsplit(".", 1)[-1]
        self.qualified_name = name
        self._annotations = annotations
        self._interfaces = interfaces
        self.parent = parent

    def supertype(self) -> StubClass | None:
        return self.parent

    def annotations(self) -> tuple[str, ...]:
        return self._annotations

    def implemented_interfaces(self) -> tuple[str, ...]:
        return self._interfaces


def _chain(length: int, top: StubClass) -> StubClass:
    """Return the bottom of a chain whose ancestor `length` hops up is `top`."""
    current = top
    for index in range(length):
        current = StubClass(f"com.example.C{index}", parent=current)
    return current


def test_marker_annotation_qualifies_directly() -> None:
    engine = QualificationEngine()

    result = engine.evaluate(StubClass("com.example.Order", annotations=("Autoserializable",)))

    assert result.qualifies
    assert result.evidence is Evidence.ANNOTATION
    assert result.source == "com.example.Order"
    assert result.depth == 0


def test_qualified_annotation_matches_on_simple_name() -> None:
    engine = QualificationEngine()

    assert engine.qualifies(StubClass("A", annotations=("com.brotech.Autoserializable",)))
    assert engine.qualifies(StubClass("B", annotations=("org.acme.Autoserializable",)))
    assert not engine.qualifies(StubClass("C", annotations=("Deprecated",)))


@pytest.mark.parametrize(
    ("interface", "expected"),
    [
        ("Autoserializable", True),
        ("com.yourcompany.Autoserializable", True),
        ("com.brotech.Autoserializable", True),
        ("com.other.NotAutoserializableThing", False),
        ("com.other.AutoserializableSupport", False),
        ("java.io.Serializable", False),
    ],
)
def test_interface_matching_is_exact_or_whole_segment(interface: str, expected: bool) -> None:
    engine = QualificationEngine()

    result = engine.evaluate(StubClass("com.example.Thing", interfaces=(interface,)))

    assert result.qualifies is expected
    if expected:
        assert result.evidence is Evidence.INTERFACE


def test_qualification_is_inherited_within_depth_limit() -> None:
    engine = QualificationEngine()
    top = StubClass("com.example.Root", annotations=("Autoserializable",))

    bottom = _chain(10, top)
    result = engine.evaluate(bottom)

    assert result.qualifies
    assert result.evidence is Evidence.INHERITED
    assert result.source == "com.example.Root"
    assert result.depth == 10


def test_qualification_beyond_depth_limit_is_false() -> None:
    engine = QualificationEngine()
    top = StubClass("com.example.Root", annotations=("Autoserializable",))

    assert not engine.qualifies(_chain(11, top))
    assert not engine.qualifies(_chain(25, top))


def test_custom_depth_limit_is_honoured() -> None:
    engine = QualificationEngine(max_depth=2)
    top = StubClass("com.example.Root", interfaces=("Autoserializable",))

    assert engine.qualifies(_chain(2, top))
    assert not engine.qualifies(_chain(3, top))


def test_cyclic_supertype_chain_terminates_without_qualifying() -> None:
    engine = QualificationEngine()
    first = StubClass("com.example.A")
    second = StubClass("com.example.B", parent=first)
    first.parent = second

    assert not engine.qualifies(first)


def test_self_referencing_class_terminates() -> None:
    engine = QualificationEngine()
    loop = StubClass("com.example.Loop")
    loop.parent = loop

    assert not engine.qualifies(loop)


def test_walk_stops_at_root_type() -> None:
    engine = QualificationEngine()
    root = StubClass("java.lang.Object", annotations=("Autoserializable",))

    assert not engine.qualifies(StubClass("com.example.Leaf", parent=root))


def test_engine_rejects_invalid_configuration() -> None:
    with pytest.raises(ValueError):
        QualificationEngine(markers=["", "  "])
    with pytest.raises(ValueError):
        QualificationEngine(max_depth=-1)


def test_engine_walks_structural_model_across_files() -> None:
    model = StructuralModel()
    model.update_file(
        "src/base/Base.java",
        "package base;\n@Autoserializable\npublic class Base {}\n",
    )
    model.update_file(
        "src/app/Child.java",
        "package app;\nimport base.Base;\npublic class Child extends Base {}\n",
    )
    engine = QualificationEngine()
    child = model.find_class("app.Child")

    assert child is not None
    result = engine.evaluate(child)
    assert result.qualifies
    assert result.evidence is Evidence.INHERITED
    assert result.source == "base.Base"
