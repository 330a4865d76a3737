"""Lexical Java source analysis."""

from .declarations import JavaCompilationUnit, JavaTypeDeclaration, parse_compilation_unit
from .lexical import LexicalRules, LexicalToken, mask_comments_and_strings, scan_tokens

__all__ = [
    "JavaCompilationUnit",
    "JavaTypeDeclaration",
    "LexicalRules",
    "LexicalToken",
    "mask_comments_and_strings",
    "parse_compilation_unit",
    "scan_tokens",
]
