"""
Expression language of the template engine.

Logical (||, &&), comparison, arithmetic and unary operators over string,
number, boolean, null literals and dotted context paths.
"""

from .lexer import ExpressionLexer, Token
from .parser import ExpressionParser, compile_expression
from .evaluator import ExpressionEvaluator, evaluate, truthy
from .values import display, truthy as is_truthy

__all__ = [
    "ExpressionLexer",
    "Token",
    "ExpressionParser",
    "compile_expression",
    "ExpressionEvaluator",
    "evaluate",
    "truthy",
    "display",
    "is_truthy",
]
