"""Lexical extraction of Java type declarations and their supertype clauses."""

from __future__ import annotations

import re
from dataclasses import dataclass

from serial_guard.java.lexical import LexicalToken, mask_comments_and_strings, scan_tokens

_NAME = r"[A-Za-z_$][A-Za-z0-9_$]*(?:\s*\.\s*[A-Za-z_$][A-Za-z0-9_$]*)*"
_PACKAGE_RE = re.compile(rf"^\s*package\s+({_NAME})\s*;", re.MULTILINE)
_IMPORT_RE = re.compile(rf"^\s*import\s+(static\s+)?({_NAME})(\s*\.\s*\*)?\s*;", re.MULTILINE)
_TYPE_KEYWORDS = frozenset({"class", "interface", "enum", "record"})
_CLAUSE_KEYWORDS = frozenset({"extends", "implements", "permits"})


@dataclass(slots=True, frozen=True)
class JavaTypeDeclaration:
    """One type declaration as written in source, names unresolved."""

    kind: str
    name: str
    qualified_name: str
    enclosing: str | None
    annotations: tuple[str, ...]
    superclass: str | None
    interfaces: tuple[str, ...]
    line: int
    column: int


@dataclass(slots=True, frozen=True)
class JavaCompilationUnit:
    """Package, imports and declared types of one Java source file."""

    path: str
    package: str | None
    imports: tuple[str, ...]
    wildcard_imports: tuple[str, ...]
    types: tuple[JavaTypeDeclaration, ...]

    def import_for(self, simple_name: str) -> str | None:
        """Return the single-type import that binds a simple name, if any."""
        suffix = f".{simple_name}"
        for imported in self.imports:
            if imported.endswith(suffix):
                return imported
        return None


def parse_compilation_unit(path: str, text: str) -> JavaCompilationUnit:
    """Extract package, imports and every (possibly nested) type declaration."""
    masked = mask_comments_and_strings(text)
    package_match = _PACKAGE_RE.search(masked)
    package = _compact(package_match.group(1)) if package_match is not None else None

    imports: list[str] = []
    wildcard_imports: list[str] = []
    for matched in _IMPORT_RE.finditer(masked):
        if matched.group(1):
            continue
        name = _compact(matched.group(2))
        if matched.group(3):
            wildcard_imports.append(name)
        else:
            imports.append(name)

    collector = _TypeCollector(scan_tokens(masked), package)
    return JavaCompilationUnit(
        path=path,
        package=package,
        imports=tuple(imports),
        wildcard_imports=tuple(wildcard_imports),
        types=tuple(collector.collect()),
    )


class _TypeCollector:
    def __init__(self, tokens: list[LexicalToken], package: str | None) -> None:
        self._tokens = tokens
        self._package = package

    def collect(self) -> list[JavaTypeDeclaration]:
        tokens = self._tokens
        declarations: list[JavaTypeDeclaration] = []
        # (qualified name, brace depth of its body)
        enclosing: list[tuple[str, int]] = []
        pending_annotations: list[str] = []
        depth = 0
        index = 0
        while index < len(tokens):
            text = tokens[index].text
            if text == "@":
                if self._text_at(index + 1) == "interface":
                    index += 1
                    continue
                name, index = self._annotation(index + 1)
                if name:
                    pending_annotations.append(name)
                continue
            if text in _TYPE_KEYWORDS and self._starts_declaration(index):
                kind = text
                if self._text_at(index - 1) == "@":
                    kind = "annotation"
                outer = enclosing[-1][0] if enclosing else None
                declaration, index = self._declaration(index, kind, outer, pending_annotations)
                declarations.append(declaration)
                pending_annotations = []
                if self._text_at(index) == "{":
                    depth += 1
                    enclosing.append((declaration.qualified_name, depth))
                    index += 1
                continue
            if text == "{":
                depth += 1
                pending_annotations = []
            elif text == "}":
                if enclosing and enclosing[-1][1] == depth:
                    enclosing.pop()
                depth = max(0, depth - 1)
                pending_annotations = []
            elif text == ";":
                pending_annotations = []
            index += 1
        return declarations

    def _text_at(self, index: int) -> str | None:
        if 0 <= index < len(self._tokens):
            return self._tokens[index].text
        return None

    def _is_identifier_at(self, index: int) -> bool:
        return 0 <= index < len(self._tokens) and self._tokens[index].is_identifier

    def _starts_declaration(self, index: int) -> bool:
        if self._text_at(index - 1) == ".":
            return False
        if not self._is_identifier_at(index + 1):
            return False
        if self._tokens[index].text == "record":
            return self._text_at(index + 2) in {"(", "<"}
        return True

    def _annotation(self, index: int) -> tuple[str, int]:
        name, index = self._dotted_name(index)
        if self._text_at(index) == "(":
            index = self._skip_balanced(index, "(", ")")
        return name, index

    def _dotted_name(self, index: int) -> tuple[str, int]:
        if not self._is_identifier_at(index):
            return "", index
        parts = [self._tokens[index].text]
        index += 1
        while self._text_at(index) == "." and self._is_identifier_at(index + 1):
            parts.append(self._tokens[index + 1].text)
            index += 2
        return ".".join(parts), index

    def _skip_balanced(self, index: int, open_text: str, close_text: str) -> int:
        balance = 0
        while index < len(self._tokens):
            text = self._tokens[index].text
            if text == open_text:
                balance += 1
            elif text == close_text:
                balance -= 1
                if balance == 0:
                    return index + 1
            index += 1
        return index

    def _declaration(
        self,
        index: int,
        kind: str,
        outer: str | None,
        annotations: list[str],
    ) -> tuple[JavaTypeDeclaration, int]:
        name_token = self._tokens[index + 1]
        if outer is not None:
            qualified_name = f"{outer}.{name_token.text}"
        elif self._package is not None:
            qualified_name = f"{self._package}.{name_token.text}"
        else:
            qualified_name = name_token.text

        clauses: dict[str, list[str]] = {keyword: [] for keyword in _CLAUSE_KEYWORDS}
        clause: str | None = None
        current: list[str] = []
        angle = 0
        paren = 0
        cursor = index + 2

        def flush() -> None:
            if clause is not None and current:
                clauses[clause].append("".join(current))
            current.clear()

        while cursor < len(self._tokens):
            token = self._tokens[cursor]
            text = token.text
            if text == "<":
                angle += 1
            elif text == ">":
                angle = max(0, angle - 1)
            elif text == "(":
                paren += 1
            elif text == ")":
                paren = max(0, paren - 1)
            elif angle == 0 and paren == 0:
                if text in {"{", ";"}:
                    break
                if text in _CLAUSE_KEYWORDS:
                    flush()
                    clause = text
                elif text == ",":
                    flush()
                elif text == "@":
                    _, cursor = self._annotation(cursor + 1)
                    continue
                elif text == "." or token.is_identifier:
                    current.append(text)
            cursor += 1
        flush()

        superclass: str | None = None
        interfaces: tuple[str, ...] = ()
        if kind == "class":
            superclass = clauses["extends"][0] if clauses["extends"] else None
            interfaces = tuple(clauses["implements"])
        elif kind == "interface":
            interfaces = tuple(clauses["extends"])
        elif kind in {"enum", "record"}:
            interfaces = tuple(clauses["implements"])

        declaration = JavaTypeDeclaration(
            kind=kind,
            name=name_token.text,
            qualified_name=qualified_name,
            enclosing=outer,
            annotations=tuple(annotations),
            superclass=superclass,
            interfaces=interfaces,
            line=name_token.line,
            column=name_token.start_col,
        )
        return declaration, cursor


def _compact(name: str) -> str:
    return "".join(name.split())
