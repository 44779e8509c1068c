"""
Layered lookup of template data by dotted identifier paths.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, Optional

_MISSING = object()


class Context:
    """
    Layered render context.

    The root layer wraps the caller's data; ``child(name, value)`` adds a
    layer that shadows one binding. Parents are never mutated, so a single
    context (and every layer built on it) can be shared between threads.
    """

    __slots__ = ("_data", "_parent")

    def __init__(self, data: Optional[Mapping[str, Any]] = None, parent: Optional["Context"] = None):
        self._data: Mapping[str, Any] = data if data is not None else {}
        self._parent = parent

    @classmethod
    def of(cls, data: Any) -> "Context":
        """Wraps arbitrary caller data; a non-mapping root becomes an empty context."""
        if isinstance(data, Context):
            return data
        if isinstance(data, Mapping):
            return cls(data)
        return cls({})

    def child(self, name: str, value: Any) -> "Context":
        return Context({name: value}, parent=self)

    def lookup(self, name: str) -> Any:
        """Innermost binding of ``name`` or _MISSING."""
        layer: Optional[Context] = self
        while layer is not None:
            if name in layer._data:
                return layer._data[name]
            layer = layer._parent
        return _MISSING

    def resolve(self, segments: Iterable[str]) -> Any:
        """
        Resolves a dotted path.

        The first segment is looked up through the layers; the rest index into
        mappings by key and into sequences by integer index. Anything that
        cannot be resolved is None.
        """
        it = iter(segments)
        try:
            head = next(it)
        except StopIteration:
            return None

        value = self.lookup(head)
        if value is _MISSING:
            return None

        for segment in it:
            value = _step(value, segment)
            if value is _MISSING:
                return None
        return value

    def get(self, path: str) -> Any:
        """Convenience: ``ctx.get("user.name")``."""
        return self.resolve(path.split("."))


def _step(value: Any, segment: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(segment, _MISSING)
    if isinstance(value, (list, tuple)):
        # isdecimal: the only digits int() accepts; longer indices cannot exist
        if segment.isdecimal() and len(segment) < 19:
            index = int(segment)
            if index < len(value):
                return value[index]
        return _MISSING
    return _MISSING


__all__ = ["Context"]
