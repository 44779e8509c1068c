"""
Base exceptions for the template engine.

All expected errors caused by template text, data or configuration
inherit from BreezeUserError. Inside the renderer they are converted to
inline diagnostics; at the CLI boundary they are printed without traces.

Programming errors and bugs should NOT inherit from BreezeUserError:
they propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class BreezeUserError(Exception):
    """
    Base class for all user-facing errors in the template engine.

    These errors indicate problems that the template author or operator can
    fix: malformed expressions, bad configuration values, etc.
    """
    pass


class ExpressionError(BreezeUserError):
    """
    Malformed or unevaluable expression.

    Attributes:
        message: Human readable reason
        expression: Full expression text the error refers to
        offset: Character offset inside ``expression``
    """

    def __init__(self, message: str, expression: str = "", offset: int = 0):
        self.message = message
        self.expression = expression
        self.offset = offset
        super().__init__(f"{message} at offset {offset} in {expression!r}")


class EvaluationError(BreezeUserError):
    """
    Failure of a single node during rendering.

    Wraps an ExpressionError (or an extension failure) together with the
    expression text of the node, so the renderer can emit a diagnostic that
    points at the exact span.
    """

    def __init__(self, message: str, expression: str, offset: int = 0, cause: Optional[Exception] = None):
        self.message = message
        self.expression = expression
        self.offset = offset
        self.cause = cause
        super().__init__(f"{message} at offset {offset} in {expression!r}")

    @classmethod
    def from_expression_error(cls, err: ExpressionError) -> "EvaluationError":
        return cls(err.message, err.expression, err.offset, cause=err)

    def diagnostic(self) -> str:
        """Inline, visibly delimited text embedded into the output."""
        return f'[template error: {self.message} at offset {self.offset} in "{self.expression}"]'


class ConfigError(BreezeUserError):
    """Invalid configuration value (with the offending key in the message)."""
    pass


__all__ = ["BreezeUserError", "ExpressionError", "EvaluationError", "ConfigError"]
