"""
Lexer for template text.

A single left-to-right pass that locates the nearest recognised token
(``{{``, ``@if(``, ``@unless(``, ``@foreach(``, ``@native``, closing tags)
and emits a flat token stream. Everything between recognised tokens is TEXT.
Spans that cannot be completed (unterminated ``{{``, unbalanced directive
header, ``@native`` without ``@endnative``) turn the remainder of the input
into TEXT.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

TEXT = "TEXT"
INTERP = "INTERP"
IF_OPEN = "IF_OPEN"
UNLESS_OPEN = "UNLESS_OPEN"
FOREACH_OPEN = "FOREACH_OPEN"
NATIVE = "NATIVE"
ENDIF = "ENDIF"
ENDUNLESS = "ENDUNLESS"
ENDFOREACH = "ENDFOREACH"
EOF = "EOF"

OPENERS = {"if": IF_OPEN, "unless": UNLESS_OPEN, "foreach": FOREACH_OPEN}
CLOSERS = {"endif": ENDIF, "endunless": ENDUNLESS, "endforeach": ENDFOREACH}

_START = re.compile(
    r"\{\{"
    r"|@(?P<open>if|unless|foreach)\("
    r"|@(?P<close>endif|endunless|endforeach)(?!\w)"
    r"|@native(?!\w)"
)
_END_NATIVE = re.compile(r"@endnative(?!\w)")


@dataclass(frozen=True)
class TemplateToken:
    """
    Template token with source offsets.

    Attributes:
        type: Token type (TEXT, INTERP, IF_OPEN, ..., EOF)
        value: Payload: literal text, interpolation body, directive header
            or native source
        start: Offset of the first character of the raw span
        end: Offset after the last character of the raw span
        raw: Raw source text of the span
    """
    type: str
    value: str
    start: int
    end: int
    raw: str

    def __repr__(self) -> str:
        return f"TemplateToken({self.type}, {self.value!r}, {self.start}:{self.end})"


class TemplateLexer:
    """Tokenizes template text into a flat list of TemplateToken."""

    def tokenize(self, text: str) -> List[TemplateToken]:
        tokens: List[TemplateToken] = []
        position = 0
        length = len(text)

        while position < length:
            match = _START.search(text, position)
            if match is None:
                break

            if match.start() > position:
                tokens.append(self._text(text, position, match.start()))

            token = self._read_span(text, match)
            if token is None:
                # Unterminated span: the rest of the input is literal text
                logger.debug("Unterminated template span at offset %d; rest is literal", match.start())
                position = match.start()
                break

            tokens.append(token)
            position = token.end

        if position < length:
            tokens.append(self._text(text, position, length))

        tokens.append(TemplateToken(EOF, "", length, length, ""))
        return tokens

    @staticmethod
    def _text(text: str, start: int, end: int) -> TemplateToken:
        chunk = text[start:end]
        return TemplateToken(TEXT, chunk, start, end, chunk)

    def _read_span(self, text: str, match: re.Match) -> Optional[TemplateToken]:
        start = match.start()
        matched = match.group(0)

        if matched == "{{":
            close = _find_interpolation_end(text, match.end())
            if close is None:
                return None
            end = close + 2
            return TemplateToken(INTERP, text[match.end():close], start, end, text[start:end])

        if match.group("open"):
            header = _read_header(text, match.end())
            if header is None:
                return None
            value, end = header
            return TemplateToken(OPENERS[match.group("open")], value, start, end, text[start:end])

        if match.group("close"):
            return TemplateToken(CLOSERS[match.group("close")], "", start, match.end(), matched)

        # @native ... @endnative
        closer = _END_NATIVE.search(text, match.end())
        if closer is None:
            return None
        end = closer.end()
        return TemplateToken(NATIVE, text[match.end():closer.start()], start, end, text[start:end])


def _skip_string(text: str, index: int) -> Optional[int]:
    """Given the index of an opening quote, returns the index after the closing one."""
    quote = text[index]
    i = index + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return None


def _find_interpolation_end(text: str, index: int) -> Optional[int]:
    """Index of the closing ``}}``; quoted strings may contain braces."""
    i = index
    while i < len(text):
        ch = text[i]
        if ch in ('"', "'"):
            after = _skip_string(text, i)
            if after is None:
                return None
            i = after
            continue
        if ch == "}" and text.startswith("}}", i):
            return i
        i += 1
    return None


def _read_header(text: str, index: int) -> Optional[Tuple[str, int]]:
    """
    Reads a parenthesised directive header whose ``(`` ends right before
    ``index``. Returns (header, end offset after ``)``) or None if unbalanced.
    """
    depth = 1
    i = index
    while i < len(text):
        ch = text[i]
        if ch in ('"', "'"):
            after = _skip_string(text, i)
            if after is None:
                return None
            i = after
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return text[index:i], i + 1
        i += 1
    return None


def split_top_level(text: str, separator: str = "|") -> List[str]:
    """
    Splits on ``separator`` outside quotes and parentheses.

    A doubled separator (``||``, the logical-or operator) never splits.
    """
    parts: List[str] = []
    depth = 0
    last = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in ('"', "'"):
            after = _skip_string(text, i)
            i = after if after is not None else len(text)
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        elif ch == separator and depth == 0:
            if text.startswith(separator * 2, i):
                i += 2
                continue
            parts.append(text[last:i])
            last = i + 1
        i += 1
    parts.append(text[last:])
    return parts


__all__ = [
    "TemplateToken",
    "TemplateLexer",
    "split_top_level",
    "TEXT",
    "INTERP",
    "IF_OPEN",
    "UNLESS_OPEN",
    "FOREACH_OPEN",
    "NATIVE",
    "ENDIF",
    "ENDUNLESS",
    "ENDFOREACH",
    "EOF",
]
