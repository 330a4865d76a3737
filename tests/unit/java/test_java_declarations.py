from __future__ import annotations

from serial_guard.java import parse_compilation_unit

SAMPLE = """
package com.example.orders;

import com.brotech.Autoserializable;
import com.example.base.*;
import static java.util.Objects.requireNonNull;

/* class Hidden extends Nothing {} */
@Autoserializable
public class Order extends BaseEntity<Long> implements Comparable<Order>, java.io.Closeable {
    private final String label = "class Fake {}";

    static class Line implements com.yourcompany.Autoserializable {
    }

    enum Status implements Marker { OPEN, CLOSED }

    Class<?> type() { return Order.class; }
}

interface Marker extends Tagged, Other {}

record Point(int x, int y) implements Shape {}

@interface Audited {}
"""


def _by_name():
    unit = parse_compilation_unit("src/Order.java", SAMPLE)
    return unit, {declaration.name: declaration for declaration in unit.types}


def test_parse_extracts_package_and_imports() -> None:
    unit, _ = _by_name()

    assert unit.package == "com.example.orders"
    assert unit.imports == ("com.brotech.Autoserializable",)
    assert unit.wildcard_imports == ("com.example.base",)
    assert unit.import_for("Autoserializable") == "com.brotech.Autoserializable"
    assert unit.import_for("requireNonNull") is None


def test_parse_collects_types_with_supertype_clauses() -> None:
    _, by_name = _by_name()

    assert set(by_name) == {"Order", "Line", "Status", "Marker", "Point", "Audited"}

    order = by_name["Order"]
    assert order.kind == "class"
    assert order.qualified_name == "com.example.orders.Order"
    assert order.annotations == ("Autoserializable",)
    assert order.superclass == "BaseEntity"
    assert order.interfaces == ("Comparable", "java.io.Closeable")
    assert order.enclosing is None

    line = by_name["Line"]
    assert line.qualified_name == "com.example.orders.Order.Line"
    assert line.enclosing == "com.example.orders.Order"
    assert line.superclass is None
    assert line.interfaces == ("com.yourcompany.Autoserializable",)
    assert line.annotations == ()

    assert by_name["Status"].kind == "enum"
    assert by_name["Status"].interfaces == ("Marker",)
    assert by_name["Marker"].kind == "interface"
    assert by_name["Marker"].interfaces == ("Tagged", "Other")
    assert by_name["Point"].kind == "record"
    assert by_name["Point"].interfaces == ("Shape",)
    assert by_name["Audited"].kind == "annotation"


def test_parse_ignores_comments_strings_and_class_literals() -> None:
    _, by_name = _by_name()

    assert "Hidden" not in by_name
    assert "Fake" not in by_name


def test_parse_records_name_token_position() -> None:
    _, by_name = _by_name()

    order = by_name["Order"]
    assert order.line == 10
    assert order.column == len("public class ") + 1


def test_parse_without_package_uses_simple_names() -> None:
    unit = parse_compilation_unit("Plain.java", "class Plain extends Base {}\n")

    assert unit.package is None
    assert [declaration.qualified_name for declaration in unit.types] == ["Plain"]
    assert unit.types[0].superclass == "Base"


def test_annotation_arguments_do_not_leak_into_names() -> None:
    source = '@SuppressWarnings("unchecked")\n@com.brotech.Autoserializable(version = 2)\nclass Tagged {}\n'
    unit = parse_compilation_unit("Tagged.java", source)

    assert unit.types[0].annotations == ("SuppressWarnings", "com.brotech.Autoserializable")


def test_field_annotations_do_not_attach_to_nested_types() -> None:
    source = "\n".join(
        [
            "class Outer {",
            "    @Deprecated int count;",
            "    class Inner {}",
            "}",
        ]
    )
    unit = parse_compilation_unit("Outer.java", source)
    inner = [declaration for declaration in unit.types if declaration.name == "Inner"][0]

    assert inner.annotations == ()
