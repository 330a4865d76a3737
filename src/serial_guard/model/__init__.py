"""Structural model provider and its contracts."""

from .locks import RevisionCounter, SnapshotLock
from .types import ClassDeclaration, LocatedClassDeclaration, NameToken
from .workspace import ModelClass, StructuralModel

__all__ = [
    "ClassDeclaration",
    "LocatedClassDeclaration",
    "ModelClass",
    "NameToken",
    "RevisionCounter",
    "SnapshotLock",
    "StructuralModel",
]
