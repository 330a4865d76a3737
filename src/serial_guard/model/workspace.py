"""In-memory structural model of a Java workspace."""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from pathlib import PurePosixPath

from serial_guard.java import JavaCompilationUnit, JavaTypeDeclaration, parse_compilation_unit
from serial_guard.model.locks import RevisionCounter, SnapshotLock
from serial_guard.model.types import NameToken

_JAVA_LANG_TYPES = frozenset(
    {
        "Object",
        "Enum",
        "Record",
        "Number",
        "Thread",
        "Throwable",
        "Exception",
        "RuntimeException",
        "Error",
    }
)


class ModelClass:
    """Class declaration backed by a parsed compilation unit.

    Supertype, annotation and interface names are resolved lazily against the
    owning model, so a declaration always reflects the model's current state.
    """

    __slots__ = ("_declaration", "_unit", "_model", "__weakref__")

    def __init__(
        self,
        declaration: JavaTypeDeclaration,
        unit: JavaCompilationUnit,
        model: StructuralModel,
    ) -> None:
        self._declaration = declaration
        self._unit = unit
        self._model = model

    @property
    def name(self) -> str:
        return self._declaration.name

    @property
    def qualified_name(self) -> str:
        return self._declaration.qualified_name

    @property
    def kind(self) -> str:
        return self._declaration.kind

    @property
    def path(self) -> str:
        return self._unit.path

    @property
    def declaration(self) -> JavaTypeDeclaration:
        return self._declaration

    @property
    def name_token(self) -> NameToken | None:
        return NameToken(
            text=self._declaration.name,
            line=self._declaration.line,
            column=self._declaration.column,
        )

    def supertype(self) -> ModelClass | None:
        reference = self._declaration.superclass
        if reference is None:
            return None
        return self._model.resolve_class(reference, self._unit, self._declaration)

    def annotations(self) -> tuple[str, ...]:
        return tuple(
            self._model.qualify(raw, self._unit, self._declaration)
            for raw in self._declaration.annotations
        )

    def implemented_interfaces(self) -> tuple[str, ...]:
        return tuple(
            self._model.qualify(raw, self._unit, self._declaration)
            for raw in self._declaration.interfaces
        )

    def __repr__(self) -> str:
        return f"ModelClass({self.qualified_name!r}, path={self.path!r})"


@dataclass(slots=True, frozen=True)
class _SourceFile:
    text: str
    unit: JavaCompilationUnit
    classes: tuple[ModelClass, ...]


class StructuralModel:
    """Parsed source files, a qualified-name index and a structural revision.

    Every mutation happens under the exclusive side of a `SnapshotLock` and
    advances the revision; analysis runs inside `read_section()`.
    """

    def __init__(self, source_extensions: Iterable[str] = (".java",)) -> None:
        self._source_extensions = tuple(extension.lower() for extension in source_extensions)
        self._files: dict[str, _SourceFile] = {}
        self._by_qualified: dict[str, ModelClass] = {}
        self._lock = SnapshotLock()
        self._revision = RevisionCounter()

    @property
    def revision(self) -> int:
        """Return the current structural revision."""
        return self._revision.current

    def read_section(self) -> AbstractContextManager[None]:
        """Return a reentrant shared-read scope over the model."""
        return self._lock.read()

    def is_source_path(self, path: str) -> bool:
        """Return True when the path has a source-file extension."""
        return PurePosixPath(path).suffix.lower() in self._source_extensions

    def update_file(self, path: str, text: str) -> bool:
        """Parse and (re)register a source file. Returns False for non-source paths."""
        if not self.is_source_path(path):
            return False
        unit = parse_compilation_unit(path, text)
        with self._lock.write():
            previous = self._files.pop(path, None)
            classes = tuple(ModelClass(declaration, unit, self) for declaration in unit.types)
            self._files[path] = _SourceFile(text=text, unit=unit, classes=classes)
            if previous is not None:
                self._unindex(previous.classes)
            for model_class in classes:
                self._by_qualified[model_class.qualified_name] = model_class
            self._revision.advance()
        return True

    def remove_file(self, path: str) -> bool:
        """Forget a source file. Returns False when it was not tracked."""
        with self._lock.write():
            previous = self._files.pop(path, None)
            if previous is None:
                return False
            self._unindex(previous.classes)
            self._revision.advance()
        return True

    def classes_in(self, path: str) -> tuple[ModelClass, ...] | None:
        """Return the declarations of a file, or None when it is not a parsed source file."""
        with self._lock.read():
            source = self._files.get(path)
            if source is None:
                return None
            return source.classes

    def text_of(self, path: str) -> str | None:
        """Return the text the file was last parsed from."""
        with self._lock.read():
            source = self._files.get(path)
            return source.text if source is not None else None

    def paths(self) -> tuple[str, ...]:
        """Return tracked paths in deterministic order."""
        with self._lock.read():
            return tuple(sorted(self._files))

    def all_classes(self) -> tuple[ModelClass, ...]:
        """Return every declaration ordered by path and position."""
        with self._lock.read():
            output: list[ModelClass] = []
            for path in sorted(self._files):
                output.extend(self._files[path].classes)
            return tuple(output)

    def find_class(self, qualified_name: str) -> ModelClass | None:
        """Return the declaration registered under a qualified name."""
        with self._lock.read():
            return self._by_qualified.get(qualified_name)

    def resolve_class(
        self,
        reference: str,
        unit: JavaCompilationUnit,
        declaration: JavaTypeDeclaration,
    ) -> ModelClass | None:
        """Resolve a type reference written in `unit` to a declaration in the model."""
        with self._lock.read():
            return self._by_qualified.get(self.qualify(reference, unit, declaration))

    def qualify(
        self,
        reference: str,
        unit: JavaCompilationUnit,
        declaration: JavaTypeDeclaration,
    ) -> str:
        """Return the best qualified form of a reference; unresolved names stay as written."""
        with self._lock.read():
            if "." not in reference:
                return self._qualify_simple(reference, unit, declaration)
            if reference in self._by_qualified:
                return reference
            head, _, rest = reference.partition(".")
            base = self._qualify_simple(head, unit, declaration)
            if base == head:
                return reference
            return f"{base}.{rest}"

    def _qualify_simple(
        self,
        name: str,
        unit: JavaCompilationUnit,
        declaration: JavaTypeDeclaration,
    ) -> str:
        declared = {item.qualified_name: item for item in unit.types}
        scope: str | None = declaration.qualified_name
        while scope is not None:
            candidate = f"{scope}.{name}"
            if candidate in self._by_qualified:
                return candidate
            owner = declared.get(scope)
            scope = owner.enclosing if owner is not None else None

        imported = unit.import_for(name)
        if imported is not None:
            return imported

        candidate = f"{unit.package}.{name}" if unit.package else name
        if candidate in self._by_qualified:
            return candidate

        for package in unit.wildcard_imports:
            candidate = f"{package}.{name}"
            if candidate in self._by_qualified:
                return candidate

        if name in _JAVA_LANG_TYPES:
            return f"java.lang.{name}"
        return name

    def _unindex(self, classes: tuple[ModelClass, ...]) -> None:
        for model_class in classes:
            name = model_class.qualified_name
            if self._by_qualified.get(name) is not model_class:
                continue
            del self._by_qualified[name]
            for source in self._files.values():
                for other in source.classes:
                    if other.qualified_name == name:
                        self._by_qualified[name] = other
