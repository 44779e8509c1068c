"""
Renderer walking a template tree.

Evaluates conditions, iterates loops in child context layers and applies
filter chains to interpolations. Failures of a single node become inline
diagnostic text at that node; sibling nodes are unaffected.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from ..context import Context
from ..errors import EvaluationError, ExpressionError
from ..expr import evaluate
from ..expr.values import display, truthy
from .filters import FilterPipeline
from .native import NativeExtension
from .nodes import (
    BlockNode,
    ConditionalNode,
    InterpolationNode,
    LoopNode,
    NativeBlockNode,
    TemplateNode,
    TextNode,
)

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """
    Renders template trees against a context.

    Stateless between calls; one instance can serve concurrent renders.

    Args:
        filters: Filter pipeline (built-ins by default)
        native: Optional extension for @native blocks; None keeps them inert
    """

    def __init__(self, filters: Optional[FilterPipeline] = None, native: Optional[NativeExtension] = None):
        self.filters = filters or FilterPipeline()
        self.native = native

    def render(self, root: TemplateNode, data: Any = None) -> str:
        """
        Renders a tree.

        Args:
            root: Parsed template (normally a BlockNode)
            data: Context or mapping of template data

        Returns:
            Output text; never raises for template or data errors
        """
        ctx = Context.of(data)
        parts: List[str] = []
        self._render_node(root, ctx, parts)
        return "".join(parts)

    def _render_node(self, node: TemplateNode, ctx: Context, out: List[str]) -> None:
        if isinstance(node, TextNode):
            out.append(node.text)
            return

        try:
            if isinstance(node, InterpolationNode):
                out.append(self._render_interpolation(node, ctx))
            elif isinstance(node, ConditionalNode):
                self._render_conditional(node, ctx, out)
            elif isinstance(node, LoopNode):
                self._render_loop(node, ctx, out)
            elif isinstance(node, BlockNode):
                self._render_children(node.children, ctx, out)
            elif isinstance(node, NativeBlockNode):
                out.append(self._render_native(node, ctx))
            else:
                logger.debug("Unknown node type %s skipped", type(node).__name__)
        except EvaluationError as e:
            logger.debug("Render error: %s", e)
            out.append(e.diagnostic())

    def _render_children(self, children, ctx: Context, out: List[str]) -> None:
        for child in children:
            self._render_node(child, ctx, out)

    def _render_interpolation(self, node: InterpolationNode, ctx: Context) -> str:
        try:
            value = display(evaluate(node.expression, ctx))
            return self.filters.apply(value, node.filters, ctx)
        except ExpressionError as e:
            raise _wrap(e, node.expression)

    def _render_conditional(self, node: ConditionalNode, ctx: Context, out: List[str]) -> None:
        try:
            condition = truthy(evaluate(node.expression, ctx))
        except ExpressionError as e:
            raise _wrap(e, node.expression)
        if condition != node.negate:
            self._render_children(node.children, ctx, out)

    def _render_loop(self, node: LoopNode, ctx: Context, out: List[str]) -> None:
        try:
            collection = evaluate(node.collection, ctx)
        except ExpressionError as e:
            raise _wrap(e, node.collection)
        if not isinstance(collection, (list, tuple)):
            return
        for item in collection:
            self._render_children(node.children, ctx.child(node.item_name, item), out)

    def _render_native(self, node: NativeBlockNode, ctx: Context) -> str:
        if self.native is None:
            logger.warning("@native block skipped: native execution is disabled")
            return ""
        try:
            return str(self.native.execute(node.source, ctx))
        except Exception as e:
            raise EvaluationError(f"native block failed: {e}", node.source.strip()[:60], 0, cause=e)


def _wrap(err: ExpressionError, expression: str) -> EvaluationError:
    """ExpressionError → EvaluationError, defaulting to the node's expression."""
    if err.expression:
        return EvaluationError.from_expression_error(err)
    return EvaluationError(err.message, expression, err.offset, cause=err)


def render(root: TemplateNode, data: Any = None) -> str:
    """Renders with built-in filters and no native extension."""
    return TemplateRenderer().render(root, data)


__all__ = ["TemplateRenderer", "render"]
