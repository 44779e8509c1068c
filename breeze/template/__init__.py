"""
Template parsing and rendering.

Provides the directive parser (``{{ }}``, ``@if``, ``@unless``, ``@foreach``),
the immutable node tree, the filter pipeline and the renderer.
"""

from .nodes import (
    TemplateNode,
    TextNode,
    FilterSpec,
    InterpolationNode,
    ConditionalNode,
    LoopNode,
    NativeBlockNode,
    BlockNode,
    format_tree,
)
from .parser import parse_template
from .filters import FilterPipeline
from .renderer import TemplateRenderer, render
from .native import NativeExtension

__all__ = [
    # Main entry points
    "parse_template",
    "render",
    "TemplateRenderer",
    "FilterPipeline",
    "NativeExtension",

    # Nodes
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
