"""
Opt-in hook for ``@native ... @endnative`` blocks.

The engine never executes native code by itself. A host application that
wants such blocks executed supplies an object implementing NativeExtension
and enables ``allow_native`` in the configuration; otherwise the blocks
render as empty text.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..context import Context


@runtime_checkable
class NativeExtension(Protocol):
    """Executes the source of a native block and returns its output text."""

    def execute(self, source: str, ctx: Context) -> str:
        ...


__all__ = ["NativeExtension"]
