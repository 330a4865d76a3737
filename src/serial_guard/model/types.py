"""Structural model contracts consumed by the qualification core."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True, frozen=True)
class NameToken:
    """Source position of a class name identifier."""

    text: str
    line: int
    column: int


class ClassDeclaration(Protocol):
    """Read-only handle to one class in the structural model."""

    name: str
    qualified_name: str

    def supertype(self) -> ClassDeclaration | None:
        """Return the resolved superclass, or None when there is none."""

    def annotations(self) -> Iterable[str]:
        """Return declared annotation names, qualified where resolvable."""

    def implemented_interfaces(self) -> Iterable[str]:
        """Return implemented interface names, qualified where resolvable."""


class LocatedClassDeclaration(ClassDeclaration, Protocol):
    """Class declaration that can point back at its name token."""

    path: str
    name_token: NameToken | None
