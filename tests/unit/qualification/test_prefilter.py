from __future__ import annotations

from serial_guard.qualification import DEFAULT_MARKERS, PreFilter


def test_prefilter_rejects_text_without_marker_names() -> None:
    prefilter = PreFilter(DEFAULT_MARKERS)

    assert not prefilter.might_qualify("package a;\npublic class Plain {}\n")
    assert prefilter.tokens == ("autoserializable",)


def test_prefilter_accepts_any_casing_of_marker_name() -> None:
    prefilter = PreFilter(DEFAULT_MARKERS)

    assert prefilter.might_qualify("@Autoserializable class A {}")
    assert prefilter.might_qualify("class A implements AutoSerializable {}")
    assert prefilter.might_qualify("// mentions autoserializable in a comment")
