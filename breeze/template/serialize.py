"""
JSON-compatible serialization of template trees for the disk cache tier.
"""

from __future__ import annotations

from typing import Any, Dict

from .nodes import (
    BlockNode,
    ConditionalNode,
    FilterSpec,
    InterpolationNode,
    LoopNode,
    NativeBlockNode,
    TemplateNode,
    TextNode,
)


def node_to_dict(node: TemplateNode) -> Dict[str, Any]:
    """Converts a tree into plain dicts/lists/strings."""
    if isinstance(node, TextNode):
        return {"kind": "text", "text": node.text}
    if isinstance(node, InterpolationNode):
        return {
            "kind": "interp",
            "expr": node.expression,
            "filters": [[f.name, f.argument] for f in node.filters],
        }
    if isinstance(node, ConditionalNode):
        return {
            "kind": "if",
            "expr": node.expression,
            "negate": node.negate,
            "children": [node_to_dict(c) for c in node.children],
        }
    if isinstance(node, LoopNode):
        return {
            "kind": "loop",
            "expr": node.collection,
            "item": node.item_name,
            "children": [node_to_dict(c) for c in node.children],
        }
    if isinstance(node, NativeBlockNode):
        return {"kind": "native", "source": node.source}
    if isinstance(node, BlockNode):
        return {"kind": "block", "children": [node_to_dict(c) for c in node.children]}
    raise ValueError(f"Cannot serialize node type {type(node).__name__}")


def node_from_dict(data: Dict[str, Any]) -> TemplateNode:
    """
    Rebuilds a tree from ``node_to_dict`` output.

    Raises:
        ValueError: On an unknown kind or a malformed payload
    """
    try:
        kind = data["kind"]
        if kind == "text":
            return TextNode(text=str(data["text"]))
        if kind == "interp":
            filters = tuple(
                FilterSpec(name=str(name), argument=None if arg is None else str(arg))
                for name, arg in data["filters"]
            )
            return InterpolationNode(expression=str(data["expr"]), filters=filters)
        if kind == "if":
            return ConditionalNode(
                expression=str(data["expr"]),
                negate=bool(data["negate"]),
                children=_children(data),
            )
        if kind == "loop":
            return LoopNode(
                collection=str(data["expr"]),
                item_name=str(data["item"]),
                children=_children(data),
            )
        if kind == "native":
            return NativeBlockNode(source=str(data["source"]))
        if kind == "block":
            return BlockNode(children=_children(data))
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed serialized node: {e}") from e
    raise ValueError(f"Unknown serialized node kind: {kind!r}")


def _children(data: Dict[str, Any]) -> tuple:
    return tuple(node_from_dict(child) for child in data["children"])


__all__ = ["node_to_dict", "node_from_dict"]
