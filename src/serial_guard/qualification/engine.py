"""Decides whether a class participates in the custom serialization contract."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from serial_guard.model.types import ClassDeclaration

DEFAULT_MARKERS = (
    "Autoserializable",
    "com.brotech.Autoserializable",
    "com.yourcompany.Autoserializable",
)
DEFAULT_MAX_SUPERTYPE_DEPTH = 10
DEFAULT_ROOT_TYPES = ("java.lang.Object", "Object")


class Evidence(StrEnum):
    """What made a class qualify."""

    ANNOTATION = "annotation"
    INTERFACE = "interface"
    INHERITED = "inherited"
    NONE = "none"


@dataclass(slots=True, frozen=True)
class QualificationResult:
    """Outcome of one qualification walk."""

    qualifies: bool
    evidence: Evidence
    source: str | None = None
    depth: int = 0

    def __bool__(self) -> bool:
        return self.qualifies


NOT_QUALIFIED = QualificationResult(qualifies=False, evidence=Evidence.NONE)


def simple_name(name: str) -> str:
    """Return the part of a dotted name after the final '.'."""
    return name.rsplit(".", 1)[-1]


class QualificationEngine:
    """Walks a class and its supertype chain looking for a marker.

    The walk is bounded by `max_depth` supertype hops; anything beyond the
    guard, including cyclic chains, resolves to not qualifying.
    """

    def __init__(
        self,
        markers: Iterable[str] = DEFAULT_MARKERS,
        max_depth: int = DEFAULT_MAX_SUPERTYPE_DEPTH,
        root_types: Iterable[str] = DEFAULT_ROOT_TYPES,
    ) -> None:
        self._markers = frozenset(marker.strip() for marker in markers if marker.strip())
        if not self._markers:
            raise ValueError("At least one marker name is required.")
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0.")
        self._interface_suffixes = tuple(f".{marker}" for marker in sorted(self._markers))
        self._max_depth = max_depth
        self._root_types = frozenset(root_types)

    @property
    def markers(self) -> frozenset[str]:
        return self._markers

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def qualifies(self, cls: ClassDeclaration) -> bool:
        """Return True when the class is serialization-sensitive."""
        return self.evaluate(cls).qualifies

    def evaluate(self, cls: ClassDeclaration) -> QualificationResult:
        """Return the qualification outcome together with its evidence."""
        current: ClassDeclaration | None = cls
        depth = 0
        # held so ids stay unique for the whole walk
        chain: list[ClassDeclaration] = []
        visited: set[int] = set()
        while current is not None:
            if id(current) in visited:
                return NOT_QUALIFIED
            visited.add(id(current))
            chain.append(current)

            evidence: Evidence | None = None
            if self.has_marker_annotation(current):
                evidence = Evidence.ANNOTATION
            elif self.implements_marker_interface(current):
                evidence = Evidence.INTERFACE
            if evidence is not None:
                return QualificationResult(
                    qualifies=True,
                    evidence=evidence if depth == 0 else Evidence.INHERITED,
                    source=current.qualified_name,
                    depth=depth,
                )

            if depth >= self._max_depth:
                return NOT_QUALIFIED
            current = self._next_supertype(current)
            depth += 1
        return NOT_QUALIFIED

    def has_marker_annotation(self, cls: ClassDeclaration) -> bool:
        """Match annotations on their qualified or simple name."""
        for annotation in cls.annotations():
            if annotation in self._markers or simple_name(annotation) in self._markers:
                return True
        return False

    def implements_marker_interface(self, cls: ClassDeclaration) -> bool:
        """Match interfaces exactly or on a whole trailing name segment."""
        for interface in cls.implemented_interfaces():
            if interface in self._markers:
                return True
            if interface.endswith(self._interface_suffixes):
                return True
        return False

    def _next_supertype(self, cls: ClassDeclaration) -> ClassDeclaration | None:
        supertype = cls.supertype()
        if supertype is None:
            return None
        if supertype.qualified_name in self._root_types:
            return None
        return supertype
