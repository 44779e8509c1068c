"""
Lexer for template expressions.

Splits an expression string into significant elements:
- Literals (numbers, quoted strings)
- Keywords (true, false, null)
- Dotted identifier paths (user.name, items.0)
- Operators and parentheses
- Whitespace (ignored)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from ..errors import ExpressionError


@dataclass(frozen=True)
class Token:
    """
    Expression token.

    Attributes:
        type: Token type (NUMBER, STRING, KEYWORD, PATH, OP, LPAREN, RPAREN, EOF)
        value: Token value (decoded for strings)
        position: Offset in the source expression
    """
    type: str
    value: str
    position: int

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.position})"


_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


class ExpressionLexer:
    """
    Lexer turning an expression string into a token list.

    Supported tokens:
    - NUMBER: 42, 3.14
    - STRING: "text", 'text' (backslash escapes)
    - KEYWORD: true, false, null
    - PATH: identifier with optional dotted segments
    - OP: || && == != >= <= > < + - * / % !
    - LPAREN / RPAREN
    - EOF: end of input
    """

    # Token specs: (regex_pattern, token_type, ignore_flag)
    TOKEN_SPECS = [
        (r'\s+', 'WHITESPACE', True),

        # Numbers are checked before paths; trailing garbage is validated later
        (r'\d+(?:\.\d+)?', 'NUMBER', False),

        (r'[A-Za-z_]\w*(?:\.\w+)*', 'PATH', False),

        # Two-character operators must precede their one-character prefixes
        (r'\|\||&&|==|!=|>=|<=', 'OP', False),
        (r'[><+\-*/%!]', 'OP', False),

        (r'\(', 'LPAREN', False),
        (r'\)', 'RPAREN', False),
    ]

    KEYWORDS = {'true', 'false', 'null'}

    # A number immediately followed by one of these is malformed (1.2.3, 12abc, 1.)
    _NUMBER_TAIL = re.compile(r'[.\w]')

    def __init__(self):
        self._compiled_patterns = [
            (re.compile(pattern), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str) -> List[Token]:
        """
        Splits an expression into tokens.

        Args:
            text: Expression source

        Returns:
            Token list terminated by EOF

        Raises:
            ExpressionError: On an unknown character, an unterminated string
                or an invalid numeric literal
        """
        tokens: List[Token] = []
        position = 0

        while position < len(text):
            char = text[position]

            if char in ('"', "'"):
                value, position_after = self._read_string(text, position)
                tokens.append(Token(type='STRING', value=value, position=position))
                position = position_after
                continue

            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue
                value = match.group(0)

                if token_type == 'NUMBER' and self._NUMBER_TAIL.match(text, match.end()):
                    bad = re.match(r'[.\w]+', text[position:]).group(0)
                    raise ExpressionError(f"Invalid numeric literal '{bad}'", text, position)

                if not ignore:
                    final_type = token_type
                    if token_type == 'PATH' and value in self.KEYWORDS:
                        final_type = 'KEYWORD'
                    tokens.append(Token(type=final_type, value=value, position=position))

                position = match.end()
                break
            else:
                raise ExpressionError(f"Unexpected character '{char}'", text, position)

        tokens.append(Token(type='EOF', value='', position=position))
        return tokens

    @staticmethod
    def _read_string(text: str, start: int) -> tuple[str, int]:
        """Reads a quoted literal starting at ``start``; returns (decoded, end)."""
        quote = text[start]
        parts: List[str] = []
        i = start + 1
        while i < len(text):
            ch = text[i]
            if ch == "\\" and i + 1 < len(text):
                nxt = text[i + 1]
                parts.append(_ESCAPES.get(nxt, nxt))
                i += 2
                continue
            if ch == quote:
                return "".join(parts), i + 1
            parts.append(ch)
            i += 1
        raise ExpressionError("Unterminated string literal", text, start)
