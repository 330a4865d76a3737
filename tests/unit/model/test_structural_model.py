from __future__ import annotations

from serial_guard.model import StructuralModel

BASE = """
package com.example.base;

import com.brotech.Autoserializable;

@Autoserializable
public abstract class BaseEntity implements Identified {
}
"""

CHILD = """
package com.example.orders;

import com.example.base.BaseEntity;

public class Order extends BaseEntity {
    static class Line extends Order {}
}
"""


def _model() -> StructuralModel:
    model = StructuralModel()
    model.update_file("src/com/example/base/BaseEntity.java", BASE)
    model.update_file("src/com/example/orders/Order.java", CHILD)
    return model


def test_update_file_indexes_classes_and_advances_revision() -> None:
    model = StructuralModel()
    assert model.revision == 0

    assert model.update_file("src/com/example/base/BaseEntity.java", BASE)
    assert model.revision == 1
    assert model.find_class("com.example.base.BaseEntity") is not None
    assert model.paths() == ("src/com/example/base/BaseEntity.java",)


def test_non_source_paths_are_ignored() -> None:
    model = StructuralModel()

    assert not model.update_file("README.md", "class NotJava {}")
    assert model.classes_in("README.md") is None
    assert model.revision == 0
    assert not model.is_source_path("build.gradle")
    assert model.is_source_path("src/Main.JAVA")


def test_supertype_resolves_through_single_type_import() -> None:
    model = _model()
    order = model.find_class("com.example.orders.Order")

    assert order is not None
    supertype = order.supertype()
    assert supertype is not None
    assert supertype.qualified_name == "com.example.base.BaseEntity"
    assert supertype.annotations() == ("com.brotech.Autoserializable",)
    assert supertype.implemented_interfaces() == ("Identified",)


def test_nested_class_resolves_enclosing_type_and_keeps_name_token() -> None:
    model = _model()
    line = model.find_class("com.example.orders.Order.Line")

    assert line is not None
    assert line.supertype() is model.find_class("com.example.orders.Order")
    token = line.name_token
    assert token is not None
    assert (token.text, token.line) == ("Line", 7)
    assert line.path == "src/com/example/orders/Order.java"


def test_unresolvable_supertype_is_none_and_java_lang_names_are_qualified() -> None:
    model = StructuralModel()
    model.update_file("Plain.java", "class Plain extends Exception implements Unknown {}\n")
    plain = model.find_class("Plain")

    assert plain is not None
    assert plain.supertype() is None
    assert plain.declaration.superclass == "Exception"
    assert plain.implemented_interfaces() == ("Unknown",)


def test_remove_file_drops_classes_and_advances_revision() -> None:
    model = _model()
    before = model.revision

    assert model.remove_file("src/com/example/base/BaseEntity.java")
    assert model.revision == before + 1
    assert model.find_class("com.example.base.BaseEntity") is None
    assert not model.remove_file("src/com/example/base/BaseEntity.java")
    order = model.find_class("com.example.orders.Order")
    assert order is not None
    assert order.supertype() is None


def test_reparse_replaces_declarations_with_new_objects() -> None:
    model = _model()
    old = model.find_class("com.example.orders.Order")

    model.update_file("src/com/example/orders/Order.java", CHILD + "\n// touched\n")
    new = model.find_class("com.example.orders.Order")

    assert new is not None
    assert new is not old
    assert model.text_of("src/com/example/orders/Order.java").endswith("// touched\n")


def test_all_classes_are_ordered_by_path_then_position() -> None:
    model = _model()

    names = [model_class.qualified_name for model_class in model.all_classes()]

    assert names == [
        "com.example.base.BaseEntity",
        "com.example.orders.Order",
        "com.example.orders.Order.Line",
    ]
