"""
Evaluator of template expressions.

Walks the expression AST and computes its value against a render context.
"""

from __future__ import annotations

import math
from typing import Any, cast

from ..context import Context
from ..errors import ExpressionError
from .model import (
    Expr,
    ExprType,
    LiteralExpr,
    PathExpr,
    UnaryExpr,
    BinaryExpr,
    LogicalExpr,
    GroupExpr,
)
from .parser import compile_expression
from .values import comparison_string, display, is_number, kind_of, to_number
from .values import truthy as value_truthy


class ExpressionEvaluator:
    """
    Evaluates an expression AST in a given context.

    Args:
        context: Render context used to resolve identifier paths
        source: Original expression text, for error reporting
    """

    def __init__(self, context: Context, source: str = ""):
        self.context = context
        self.source = source

    def evaluate(self, expr: Expr) -> Any:
        """
        Computes the value of an expression node.

        Raises:
            ExpressionError: On division by zero or a non-numeric operand
        """
        expr_type = expr.get_type()

        if expr_type == ExprType.LITERAL:
            return cast(LiteralExpr, expr).value
        elif expr_type == ExprType.PATH:
            return self.context.resolve(cast(PathExpr, expr).segments)
        elif expr_type == ExprType.GROUP:
            return self.evaluate(cast(GroupExpr, expr).inner)
        elif expr_type == ExprType.UNARY:
            return self._evaluate_unary(cast(UnaryExpr, expr))
        elif expr_type == ExprType.LOGICAL:
            return self._evaluate_logical(cast(LogicalExpr, expr))
        elif expr_type == ExprType.BINARY:
            return self._evaluate_binary(cast(BinaryExpr, expr))
        raise ExpressionError(f"Unknown expression type: {expr_type}", self.source, expr.position)

    def _evaluate_unary(self, expr: UnaryExpr) -> Any:
        operand = self.evaluate(expr.operand)
        if expr.operator == "!":
            return not value_truthy(operand)
        return -self._number(operand, expr)

    def _evaluate_logical(self, expr: LogicalExpr) -> bool:
        left = value_truthy(self.evaluate(expr.left))
        if expr.operator == "&&":
            if not left:
                return False
            return value_truthy(self.evaluate(expr.right))
        if left:
            return True
        return value_truthy(self.evaluate(expr.right))

    def _evaluate_binary(self, expr: BinaryExpr) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        op = expr.operator

        if op == "==":
            return _equals(left, right)
        if op == "!=":
            return not _equals(left, right)
        if op in (">", "<", ">=", "<="):
            return _relational(op, left, right)

        if op == "+":
            if is_number(left) and is_number(right):
                return to_number(left) + to_number(right)
            return display(left) + display(right)

        a = self._number(left, expr)
        b = self._number(right, expr)
        if op == "-":
            return a - b
        if op == "*":
            return a * b
        if b == 0:
            raise ExpressionError("Division by zero", self.source, expr.position)
        if op == "/":
            return a / b
        if math.isinf(a):
            return math.nan
        return math.fmod(a, b)

    def _number(self, value: Any, expr: Expr) -> float:
        number = to_number(value)
        if number is None:
            raise ExpressionError(
                f"Non-numeric operand of kind {kind_of(value)}", self.source, expr.position
            )
        return number


def _equals(left: Any, right: Any) -> bool:
    left_kind = kind_of(left)
    right_kind = kind_of(right)
    if left_kind == right_kind:
        if left_kind == "array":
            return list(left) == list(right)
        return left == right
    return comparison_string(left) == comparison_string(right)


def _relational(op: str, left: Any, right: Any) -> bool:
    if isinstance(left, str) and isinstance(right, str):
        a, b = left, right
    else:
        na = to_number(left)
        nb = to_number(right)
        if na is not None and nb is not None:
            a, b = na, nb
        else:
            a, b = comparison_string(left), comparison_string(right)

    if op == ">":
        return a > b
    if op == "<":
        return a < b
    if op == ">=":
        return a >= b
    return a <= b


def evaluate(expression: str, context: Context) -> Any:
    """
    Convenience: parse (memoised) and evaluate an expression string.

    Raises:
        ExpressionError: On a malformed expression or an evaluation failure
    """
    ast = compile_expression(expression)
    return ExpressionEvaluator(context, expression).evaluate(ast)


def truthy(expression: str, context: Context) -> bool:
    """Boolean view of ``evaluate``."""
    return value_truthy(evaluate(expression, context))
