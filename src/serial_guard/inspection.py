"""Per-class inspection hook for a host's own analysis pass."""

from __future__ import annotations

from dataclasses import dataclass

from serial_guard.model import LocatedClassDeclaration, StructuralModel
from serial_guard.qualification import QualificationCache


@dataclass(slots=True, frozen=True)
class InspectionWarning:
    """Warning anchored at a class name token."""

    path: str
    class_name: str
    qualified_name: str
    line: int
    column: int
    message: str
    evidence: str


class ClassInspection:
    """Answers the host's per-class callback using cached qualification."""

    def __init__(self, cache: QualificationCache, marker_label: str) -> None:
        self._cache = cache
        self._message = (
            f"This class uses {marker_label}. Be careful when modifying to maintain "
            "serialization compatibility."
        )

    def inspect_class(self, cls: LocatedClassDeclaration) -> InspectionWarning | None:
        token = cls.name_token
        if token is None:
            return None
        result = self._cache.get(cls)
        if not result.qualifies:
            return None
        return InspectionWarning(
            path=cls.path,
            class_name=cls.name,
            qualified_name=cls.qualified_name,
            line=token.line,
            column=token.column,
            message=self._message,
            evidence=result.evidence.value,
        )

    def inspect_file(self, model: StructuralModel, path: str) -> list[InspectionWarning]:
        """Inspect every class of one file; unknown files yield no warnings."""
        with model.read_section():
            classes = model.classes_in(path) or ()
            warnings = [self.inspect_class(model_class) for model_class in classes]
        return _sorted([warning for warning in warnings if warning is not None])

    def inspect_all(self, model: StructuralModel) -> list[InspectionWarning]:
        with model.read_section():
            warnings = [self.inspect_class(model_class) for model_class in model.all_classes()]
        return _sorted([warning for warning in warnings if warning is not None])


def _sorted(warnings: list[InspectionWarning]) -> list[InspectionWarning]:
    return sorted(warnings, key=lambda item: (item.path, item.line, item.column))
