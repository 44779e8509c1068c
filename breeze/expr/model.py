"""
Expression AST.

Immutable nodes produced by ExpressionParser. Every node keeps the offset of
the token that introduced it so evaluation errors can point at the source.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple


class ExprType(Enum):
    """Expression node kinds."""
    LITERAL = "literal"
    PATH = "path"
    UNARY = "unary"
    BINARY = "binary"
    LOGICAL = "logical"
    GROUP = "group"


@dataclass(frozen=True)
class Expr(ABC):
    """Base class of all expression nodes."""
    position: int

    @abstractmethod
    def get_type(self) -> ExprType:
        pass

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class LiteralExpr(Expr):
    """String, number, boolean or null literal."""
    value: Any

    def get_type(self) -> ExprType:
        return ExprType.LITERAL

    def _to_string(self) -> str:
        if self.value is None:
            return "null"
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        if isinstance(self.value, str):
            return repr(self.value)
        return str(self.value)


@dataclass(frozen=True)
class PathExpr(Expr):
    """Dotted identifier resolved against the render context."""
    segments: Tuple[str, ...]

    def get_type(self) -> ExprType:
        return ExprType.PATH

    def _to_string(self) -> str:
        return ".".join(self.segments)


@dataclass(frozen=True)
class UnaryExpr(Expr):
    """``!operand`` or ``-operand``."""
    operator: str
    operand: Expr

    def get_type(self) -> ExprType:
        return ExprType.UNARY

    def _to_string(self) -> str:
        return f"{self.operator}{self.operand}"


@dataclass(frozen=True)
class BinaryExpr(Expr):
    """Arithmetic or comparison: left op right."""
    operator: str
    left: Expr
    right: Expr

    def get_type(self) -> ExprType:
        return ExprType.BINARY

    def _to_string(self) -> str:
        return f"{self.left} {self.operator} {self.right}"


@dataclass(frozen=True)
class LogicalExpr(Expr):
    """Short-circuit ``&&`` / ``||``."""
    operator: str
    left: Expr
    right: Expr

    def get_type(self) -> ExprType:
        return ExprType.LOGICAL

    def _to_string(self) -> str:
        return f"{self.left} {self.operator} {self.right}"


@dataclass(frozen=True)
class GroupExpr(Expr):
    """Parenthesised expression, kept for faithful string output."""
    inner: Expr

    def get_type(self) -> ExprType:
        return ExprType.GROUP

    def _to_string(self) -> str:
        return f"({self.inner})"


__all__ = [
    "ExprType",
    "Expr",
    "LiteralExpr",
    "PathExpr",
    "UnaryExpr",
    "BinaryExpr",
    "LogicalExpr",
    "GroupExpr",
]
