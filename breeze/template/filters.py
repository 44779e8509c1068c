"""
Filter pipeline for interpolated values.

Filters are applied strictly left to right; each one receives the previous
filter's output string. Arguments are expression sources evaluated against the
current context at apply time. Unknown filter names are ignored.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Callable, Dict, Iterable, Optional

from ..context import Context
from ..errors import ExpressionError
from ..expr import evaluate
from ..expr.values import display, to_number
from .nodes import FilterSpec

logger = logging.getLogger(__name__)

FilterFunc = Callable[[str, Optional[str], Context], str]

_HTML_ESCAPES = {
    ord("&"): "&amp;",
    ord("<"): "&lt;",
    ord(">"): "&gt;",
    ord('"'): "&quot;",
    ord("'"): "&#39;",
}
_ASCII_UPPER = {c: c - 32 for c in range(ord("a"), ord("z") + 1)}
_ASCII_LOWER = {c: c + 32 for c in range(ord("A"), ord("Z") + 1)}
_PLACEHOLDER = re.compile(r"\{0?\}")


def _argument_value(argument: Optional[str], ctx: Context, filter_name: str):
    if argument is None:
        raise ExpressionError(f"Filter '{filter_name}' requires an argument", "", 0)
    return evaluate(argument, ctx)


def escape_filter(value: str, argument: Optional[str], ctx: Context) -> str:
    return value.translate(_HTML_ESCAPES)


def upper_filter(value: str, argument: Optional[str], ctx: Context) -> str:
    return value.translate(_ASCII_UPPER)


def lower_filter(value: str, argument: Optional[str], ctx: Context) -> str:
    return value.translate(_ASCII_LOWER)


def trim_filter(value: str, argument: Optional[str], ctx: Context) -> str:
    return value.strip()


def truncate_filter(value: str, argument: Optional[str], ctx: Context) -> str:
    """Hard cut to ``n`` characters, no ellipsis."""
    raw = _argument_value(argument, ctx, "truncate")
    limit = to_number(raw)
    if limit is None or math.isnan(limit):
        raise ExpressionError(f"truncate() expects a number, got {display(raw)!r}", argument, 0)
    if math.isinf(limit):
        return value if limit > 0 else ""
    return value[:max(0, int(limit))]


def default_filter(value: str, argument: Optional[str], ctx: Context) -> str:
    """Substitutes only when the current string is empty."""
    if value != "":
        return value
    return display(_argument_value(argument, ctx, "default"))


def format_filter(value: str, argument: Optional[str], ctx: Context) -> str:
    """Puts the value into the first ``{}`` or ``{0}`` of the template."""
    template = display(_argument_value(argument, ctx, "format"))
    return _PLACEHOLDER.sub(lambda _m: value, template, count=1)


BUILTIN_FILTERS: Dict[str, FilterFunc] = {
    "escape": escape_filter,
    "upper": upper_filter,
    "lower": lower_filter,
    "trim": trim_filter,
    "truncate": truncate_filter,
    "default": default_filter,
    "format": format_filter,
}


class FilterPipeline:
    """
    Registry of named filters plus the left-to-right application of a chain.

    Each instance starts with the built-in filters; ``register`` adds or
    replaces filters on that instance only.
    """

    def __init__(self, filters: Optional[Dict[str, FilterFunc]] = None):
        self._filters: Dict[str, FilterFunc] = dict(BUILTIN_FILTERS)
        if filters:
            self._filters.update(filters)

    def register(self, name: str, func: FilterFunc) -> None:
        self._filters[name] = func

    def names(self) -> list[str]:
        return sorted(self._filters)

    def apply(self, value: str, filters: Iterable[FilterSpec], ctx: Context) -> str:
        """
        Applies a filter chain.

        Raises:
            ExpressionError: If a filter argument fails to evaluate or a
                filter raises
        """
        for spec in filters:
            func = self._filters.get(spec.name)
            if func is None:
                logger.debug("Unknown filter '%s' ignored", spec.name)
                continue
            try:
                result = func(value, spec.argument, ctx)
            except ExpressionError:
                raise
            except Exception as e:
                raise ExpressionError(f"Filter '{spec.name}' failed: {e}", "", 0) from e
            value = result if isinstance(result, str) else display(result)
        return value


__all__ = ["FilterPipeline", "FilterFunc", "BUILTIN_FILTERS"]
