"""Deterministic lexical scanning helpers for Java sources."""

from __future__ import annotations

import re
from dataclasses import dataclass

_TOKEN_PATTERN = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*|[{}()<>\[\],;.@=?&]")


@dataclass(slots=True, frozen=True)
class LexicalRules:
    """Configurable lexical markers used while masking non-code text."""

    line_comment_prefixes: tuple[str, ...] = ("//",)
    block_comment_pairs: tuple[tuple[str, str], ...] = (("/*", "*/"),)
    string_delimiters: tuple[str, ...] = ('"""', '"', "'")
    escape_char: str = "\\"


@dataclass(slots=True, frozen=True)
class LexicalToken:
    """Identifier or punctuation token with 1-based line/column metadata."""

    text: str
    line: int
    start_col: int
    end_col: int

    @property
    def is_identifier(self) -> bool:
        """Return True for identifier tokens (keywords included)."""
        first = self.text[0]
        return first.isalpha() or first in "_$"


def mask_comments_and_strings(text: str, rules: LexicalRules | None = None) -> str:
    """Mask comments and literals while preserving original line count and character offsets."""
    active_rules = rules or LexicalRules()
    line_prefixes = tuple(
        sorted(
            (prefix for prefix in active_rules.line_comment_prefixes if prefix),
            key=len,
            reverse=True,
        )
    )
    block_pairs = tuple(
        sorted(
            ((start, end) for start, end in active_rules.block_comment_pairs if start and end),
            key=lambda pair: len(pair[0]),
            reverse=True,
        )
    )
    string_delimiters = tuple(
        sorted(
            (marker for marker in active_rules.string_delimiters if marker),
            key=len,
            reverse=True,
        )
    )

    chars = list(text)
    length = len(text)
    index = 0
    state: tuple[str, str] | None = None

    while index < length:
        if state is None:
            line_marker = _match_any(text, index, line_prefixes)
            if line_marker is not None:
                _blank(chars, index, len(line_marker))
                state = ("line_comment", line_marker)
                index += len(line_marker)
                continue

            block_marker = _match_block_start(text, index, block_pairs)
            if block_marker is not None:
                start_marker, end_marker = block_marker
                _blank(chars, index, len(start_marker))
                state = ("block_comment", end_marker)
                index += len(start_marker)
                continue

            string_marker = _match_any(text, index, string_delimiters)
            if string_marker is not None:
                _blank(chars, index, len(string_marker))
                state = ("string", string_marker)
                index += len(string_marker)
                continue

            index += 1
            continue

        mode, marker = state
        if mode == "line_comment":
            if text[index] == "\n":
                state = None
            else:
                chars[index] = " "
            index += 1
            continue

        closes = text.startswith(marker, index)
        if mode == "string":
            closes = closes and not _is_escaped(text, index, marker, active_rules.escape_char)
        if closes:
            _blank(chars, index, len(marker))
            state = None
            index += len(marker)
            continue
        if text[index] != "\n":
            chars[index] = " "
        index += 1

    return "".join(chars)


def scan_tokens(masked_text: str) -> list[LexicalToken]:
    """Extract identifier and punctuation tokens from already-masked source text."""
    tokens: list[LexicalToken] = []
    for line_number, raw_line in enumerate(masked_text.splitlines(), start=1):
        for match in _TOKEN_PATTERN.finditer(raw_line):
            tokens.append(
                LexicalToken(
                    text=match.group(0),
                    line=line_number,
                    start_col=match.start() + 1,
                    end_col=match.end(),
                )
            )
    return tokens


def _blank(chars: list[str], index: int, count: int) -> None:
    for offset in range(count):
        chars[index + offset] = " "


def _match_any(text: str, index: int, markers: tuple[str, ...]) -> str | None:
    for marker in markers:
        if text.startswith(marker, index):
            return marker
    return None


def _match_block_start(
    text: str,
    index: int,
    pairs: tuple[tuple[str, str], ...],
) -> tuple[str, str] | None:
    for start, end in pairs:
        if text.startswith(start, index):
            return start, end
    return None


def _is_escaped(text: str, index: int, marker: str, escape_char: str) -> bool:
    if len(marker) > 1:
        return False
    backslashes = 0
    cursor = index - 1
    while cursor >= 0 and text[cursor] == escape_char:
        backslashes += 1
        cursor -= 1
    return backslashes % 2 == 1
