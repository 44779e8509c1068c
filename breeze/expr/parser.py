"""
Recursive-descent parser for template expressions.

Builds an expression AST from the token stream, honouring operator
precedence and parenthesised grouping.

Grammar:
expression     → or_expression
or_expression  → and_expression ("||" and_expression)*
and_expression → comparison ("&&" comparison)*
comparison     → additive (("==" | "!=" | ">" | "<" | ">=" | "<=") additive)?
additive       → multiplicative (("+" | "-") multiplicative)*
multiplicative → unary (("*" | "/" | "%") unary)*
unary          → ("!" | "-") unary | primary
primary        → NUMBER | STRING | KEYWORD | PATH | "(" expression ")"
"""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, List

from ..errors import ExpressionError
from .lexer import ExpressionLexer, Token
from .model import (
    Expr,
    LiteralExpr,
    PathExpr,
    UnaryExpr,
    BinaryExpr,
    LogicalExpr,
    GroupExpr,
)

COMPARISON_OPS = ("==", "!=", ">=", "<=", ">", "<")
_KEYWORD_VALUES = {"true": True, "false": False, "null": None}

# Deepest AST (and parenthesis/unary nesting) accepted; keeps parsing and
# evaluation well inside the interpreter's recursion limit.
MAX_DEPTH = 50


class ExpressionParser:
    """
    Recursive-descent expression parser.

    Not thread-safe: keeps the token cursor on the instance. Use
    ``compile_expression`` for shared, memoised parsing.
    """

    def __init__(self):
        self.lexer = ExpressionLexer()
        self._source = ""
        self._tokens: List[Token] = []
        self._position = 0
        self._nesting = 0
        self._depths: Dict[int, int] = {}

    def parse(self, expression: str) -> Expr:
        """
        Parses an expression string into an AST.

        Args:
            expression: Expression source

        Returns:
            Root node of the AST

        Raises:
            ExpressionError: On any lexical or syntax error
        """
        self._source = expression
        self._tokens = self.lexer.tokenize(expression)
        self._position = 0
        self._nesting = 0
        self._depths = {}

        if self._is_at_end():
            raise ExpressionError("Empty expression", expression, 0)

        result = self._parse_or()
        self._depths = {}

        if not self._is_at_end():
            current = self._current_token()
            if current.type == 'RPAREN':
                raise self._error("Unbalanced ')'", current.position)
            raise self._error(f"Unexpected token '{current.value}'", current.position)

        return result

    def _parse_or(self) -> Expr:
        left = self._parse_and()
        while self._check_op("||"):
            op = self._advance()
            right = self._parse_and()
            node = LogicalExpr(position=op.position, operator="||", left=left, right=right)
            left = self._node(node, left, right)
        return left

    def _parse_and(self) -> Expr:
        left = self._parse_comparison()
        while self._check_op("&&"):
            op = self._advance()
            right = self._parse_comparison()
            node = LogicalExpr(position=op.position, operator="&&", left=left, right=right)
            left = self._node(node, left, right)
        return left

    def _parse_comparison(self) -> Expr:
        # Non-associative: a second comparison falls through to "unexpected token"
        left = self._parse_additive()
        if self._check_op(*COMPARISON_OPS):
            op = self._advance()
            right = self._parse_additive()
            node = BinaryExpr(position=op.position, operator=op.value, left=left, right=right)
            return self._node(node, left, right)
        return left

    def _parse_additive(self) -> Expr:
        left = self._parse_multiplicative()
        while self._check_op("+", "-"):
            op = self._advance()
            right = self._parse_multiplicative()
            node = BinaryExpr(position=op.position, operator=op.value, left=left, right=right)
            left = self._node(node, left, right)
        return left

    def _parse_multiplicative(self) -> Expr:
        left = self._parse_unary()
        while self._check_op("*", "/", "%"):
            op = self._advance()
            right = self._parse_unary()
            node = BinaryExpr(position=op.position, operator=op.value, left=left, right=right)
            left = self._node(node, left, right)
        return left

    def _parse_unary(self) -> Expr:
        if self._check_op("!", "-"):
            op = self._advance()
            self._descend(op.position)
            operand = self._parse_unary()
            self._nesting -= 1
            node = UnaryExpr(position=op.position, operator=op.value, operand=operand)
            return self._node(node, operand)
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        token = self._current_token()

        if token.type == 'LPAREN':
            self._advance()
            self._descend(token.position)
            inner = self._parse_or()
            self._nesting -= 1
            if self._current_token().type != 'RPAREN':
                raise self._error("Unbalanced '(': expected ')'", token.position)
            self._advance()
            return self._node(GroupExpr(position=token.position, inner=inner), inner)

        if token.type == 'NUMBER':
            self._advance()
            try:
                value = float(token.value) if "." in token.value else int(token.value)
            except ValueError:
                # int() refuses literals beyond the interpreter's digit limit
                raise self._error(
                    f"Invalid numeric literal '{token.value[:20]}...'", token.position
                ) from None
            return LiteralExpr(position=token.position, value=value)

        if token.type == 'STRING':
            self._advance()
            return LiteralExpr(position=token.position, value=token.value)

        if token.type == 'KEYWORD':
            self._advance()
            return LiteralExpr(position=token.position, value=_KEYWORD_VALUES[token.value])

        if token.type == 'PATH':
            self._advance()
            return PathExpr(position=token.position, segments=tuple(token.value.split(".")))

        if token.type == 'EOF':
            raise self._error("Unexpected end of expression", token.position)
        if token.type == 'RPAREN':
            raise self._error("Unbalanced ')'", token.position)
        raise self._error(f"Unexpected token '{token.value}'", token.position)

    # Depth tracking

    def _descend(self, position: int) -> None:
        self._nesting += 1
        if self._nesting > MAX_DEPTH:
            raise self._error("Expression nested too deeply", position)

    def _node(self, node: Expr, *children: Expr) -> Expr:
        depth = 1 + max(self._depths.get(id(child), 1) for child in children)
        if depth > MAX_DEPTH:
            raise self._error("Expression nested too deeply", node.position)
        self._depths[id(node)] = depth
        return node

    # Token helpers

    def _current_token(self) -> Token:
        return self._tokens[self._position]

    def _is_at_end(self) -> bool:
        return self._current_token().type == 'EOF'

    def _advance(self) -> Token:
        token = self._tokens[self._position]
        if not self._is_at_end():
            self._position += 1
        return token

    def _check_op(self, *ops: str) -> bool:
        current = self._current_token()
        return current.type == 'OP' and current.value in ops

    def _error(self, message: str, position: int) -> ExpressionError:
        return ExpressionError(message, self._source, position)


@lru_cache(maxsize=2048)
def compile_expression(expression: str) -> Expr:
    """
    Parses an expression once per distinct source string.

    The AST is immutable, so the memoised result is shared between threads.
    Failures are not cached and re-raise on every call.
    """
    return ExpressionParser().parse(expression)
