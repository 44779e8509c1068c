"""
Value kinds of the template data model and the conversions between them.

Values are plain JSON-like Python objects: str, int/float, bool, None,
list/tuple and mappings.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any, Optional

from ..errors import ExpressionError


def kind_of(value: Any) -> str:
    """Returns the value kind: null, bool, number, string, array, object or other."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return "other"


def is_number(value: Any) -> bool:
    return kind_of(value) == "number"


def format_number(value: float) -> str:
    """Canonical numeric formatting: 3.0 → '3', 2.5 → '2.5'."""
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError:
            # beyond the interpreter's int-to-str digit limit
            return "Infinity" if value > 0 else "-Infinity"
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _json_default(value: Any) -> str:
    return display(value)


def _to_json(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=_json_default)
    except (ValueError, RecursionError) as e:
        raise ExpressionError(f"Value cannot be displayed: {e}") from e


def display(value: Any) -> str:
    """
    Converts a value to its output text.

    string as-is, numbers canonical, booleans 'true'/'false', null as empty
    string, containers as compact JSON.
    """
    kind = kind_of(value)
    if kind == "string":
        return value
    if kind == "null":
        return ""
    if kind == "bool":
        return "true" if value else "false"
    if kind == "number":
        return format_number(value)
    if kind == "array":
        return _to_json(list(value))
    if kind == "object":
        return _to_json(dict(value))
    return str(value)


def comparison_string(value: Any) -> str:
    """Stringification used for equality across differing kinds (null → 'null')."""
    if value is None:
        return "null"
    return display(value)


def truthy(value: Any) -> bool:
    """false, null, '', 0 and empty containers are false; everything else is true."""
    kind = kind_of(value)
    if kind == "null":
        return False
    if kind == "bool":
        return value
    if kind == "number":
        return value != 0
    if kind in ("string", "array", "object"):
        return len(value) > 0
    return bool(value)


def to_number(value: Any) -> Optional[float]:
    """
    Numeric coercion for arithmetic operators.

    Integers outside the float range saturate to +/-Infinity, like any
    other floating-point overflow.

    Returns:
        The float value, or None if the value has no numeric meaning
    """
    kind = kind_of(value)
    if kind == "number":
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if kind == "bool":
        return 1.0 if value else 0.0
    if kind == "null":
        return 0.0
    if kind == "string":
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


__all__ = [
    "kind_of",
    "is_number",
    "format_number",
    "display",
    "comparison_string",
    "truthy",
    "to_number",
]
