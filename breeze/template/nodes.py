"""
Template AST nodes.

Nodes are frozen dataclasses holding their children in tuples, so a parsed
tree is immutable and can be shared between threads and cache tiers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class TemplateNode:
    """Base class of all template nodes."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """Static text emitted as is."""
    text: str


@dataclass(frozen=True)
class FilterSpec:
    """
    One filter of an interpolation chain: ``name`` or ``name(argument)``.

    The argument is kept as expression source and evaluated at apply time.
    """
    name: str
    argument: Optional[str] = None


@dataclass(frozen=True)
class InterpolationNode(TemplateNode):
    """``{{ expression | filter | filter(arg) }}``."""
    expression: str
    filters: Tuple[FilterSpec, ...] = ()


@dataclass(frozen=True)
class ConditionalNode(TemplateNode):
    """
    ``@if(expr) ... @endif`` (negate=False) or
    ``@unless(expr) ... @endunless`` (negate=True).
    """
    expression: str
    negate: bool
    children: Tuple[TemplateNode, ...] = ()


@dataclass(frozen=True)
class LoopNode(TemplateNode):
    """``@foreach(collection as item) ... @endforeach``."""
    collection: str
    item_name: str
    children: Tuple[TemplateNode, ...] = ()


@dataclass(frozen=True)
class NativeBlockNode(TemplateNode):
    """
    ``@native ... @endnative``.

    The source is never executed by the engine itself; see template.native.
    """
    source: str


@dataclass(frozen=True)
class BlockNode(TemplateNode):
    """Root of a parsed template."""
    children: Tuple[TemplateNode, ...] = ()


def format_tree(node: TemplateNode, indent: int = 0) -> str:
    """Formats the tree for debugging."""
    prefix = "  " * indent
    lines = []

    if isinstance(node, TextNode):
        preview = node.text[:40] + "..." if len(node.text) > 40 else node.text
        lines.append(f"{prefix}Text({preview!r})")
    elif isinstance(node, InterpolationNode):
        filters = " | ".join(
            f.name if f.argument is None else f"{f.name}({f.argument})" for f in node.filters
        )
        lines.append(f"{prefix}Interpolation({node.expression!r}{' | ' + filters if filters else ''})")
    elif isinstance(node, ConditionalNode):
        kind = "Unless" if node.negate else "If"
        lines.append(f"{prefix}{kind}({node.expression!r})")
        lines.extend(format_tree(child, indent + 1) for child in node.children)
    elif isinstance(node, LoopNode):
        lines.append(f"{prefix}Foreach({node.collection!r} as {node.item_name})")
        lines.extend(format_tree(child, indent + 1) for child in node.children)
    elif isinstance(node, NativeBlockNode):
        lines.append(f"{prefix}Native({len(node.source)} chars)")
    elif isinstance(node, BlockNode):
        lines.append(f"{prefix}Block")
        lines.extend(format_tree(child, indent + 1) for child in node.children)
    else:
        lines.append(f"{prefix}{type(node).__name__}")

    return "\n".join(lines)


__all__ = [
    "TemplateNode",
    "TextNode",
    "FilterSpec",
    "InterpolationNode",
    "ConditionalNode",
    "LoopNode",
    "NativeBlockNode",
    "BlockNode",
    "format_tree",
]
