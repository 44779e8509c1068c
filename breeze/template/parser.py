"""
Directive parser for templates.

Recursive descent over the flat token stream from TemplateLexer. Each block
opener parses its body up to its own closing tag; nested openers recurse, so
an ``@if`` inside an ``@if`` never terminates the outer block early.

Malformed input is never fatal: the offending span (or, for a block that is
never closed, the rest of the input) becomes literal text. So does a block
opened more than ``MAX_NESTING`` levels deep.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from . import lexer as lx
from .lexer import TemplateLexer, TemplateToken, split_top_level
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

logger = logging.getLogger(__name__)

LOOP_HEADER = re.compile(r"^\s*(.+?)\s+as\s+([A-Za-z_]\w*)\s*$", re.DOTALL)
FILTER_TOKEN = re.compile(r"^([A-Za-z_]\w*)\s*(?:\((.*)\))?$", re.DOTALL)

_CLOSER_FOR = {
    lx.IF_OPEN: lx.ENDIF,
    lx.UNLESS_OPEN: lx.ENDUNLESS,
    lx.FOREACH_OPEN: lx.ENDFOREACH,
}

# Blocks opened deeper than this are kept as literal text.
MAX_NESTING = 64


class TemplateParser:
    """
    Parser building an immutable template tree.

    Instances hold per-parse cursor state; ``parse_template`` creates a
    fresh one per call.
    """

    def __init__(self, text: str):
        self.text = text
        self.lexer = TemplateLexer()
        self._tokens: List[TemplateToken] = []
        self._position = 0
        self._depth = 0

    def parse(self) -> BlockNode:
        """
        Parses the whole template.

        Returns:
            Root BlockNode
        """
        self._tokens = self.lexer.tokenize(self.text)
        self._position = 0
        self._depth = 0
        nodes, _ = self._parse_nodes(until=None)
        return BlockNode(children=tuple(nodes))

    def _parse_nodes(self, until: Optional[str]) -> Tuple[List[TemplateNode], bool]:
        """
        Parses nodes until the ``until`` closer or EOF.

        Returns:
            (nodes, closed) where ``closed`` tells whether the closer was found
        """
        nodes: List[TemplateNode] = []

        while True:
            token = self._advance()

            if token.type == lx.EOF:
                return nodes, False

            if token.type == lx.TEXT:
                _append_text(nodes, token.value)

            elif token.type == lx.INTERP:
                node = parse_interpolation(token.value)
                if node is None:
                    logger.debug("Malformed interpolation at offset %d kept as text", token.start)
                    _append_text(nodes, token.raw)
                else:
                    nodes.append(node)

            elif token.type in _CLOSER_FOR:
                if self._depth >= MAX_NESTING and _opens_block(token):
                    logger.debug("%s at offset %d nested too deeply; block kept as text", token.type, token.start)
                    end = self._skip_block(token)
                    if end is None:
                        _append_text(nodes, self.text[token.start:])
                        return nodes, False
                    _append_text(nodes, self.text[token.start:end])
                    continue

                node = self._parse_block(token)
                if node is None:
                    # Unclosed block: everything from the opener on is literal
                    _append_text(nodes, self.text[token.start:])
                    return nodes, False
                if isinstance(node, TextNode):
                    _append_text(nodes, node.text)
                else:
                    nodes.append(node)

            elif token.type == lx.NATIVE:
                nodes.append(NativeBlockNode(source=token.value))

            elif token.type == until:
                return nodes, True

            else:
                # Stray closing tag of another block
                logger.debug("Stray %s at offset %d kept as text", token.type, token.start)
                _append_text(nodes, token.raw)

    def _parse_block(self, opener: TemplateToken) -> Optional[TemplateNode]:
        """
        Parses an opened block and its body.

        Returns:
            The block node, a TextNode for a malformed header, or None when the
            block is never closed
        """
        if not _opens_block(opener):
            logger.debug("Malformed @foreach header %r kept as text", opener.value)
            return TextNode(text=opener.raw)

        self._depth += 1
        children, closed = self._parse_nodes(until=_CLOSER_FOR[opener.type])
        self._depth -= 1
        if not closed:
            logger.debug("Unclosed %s at offset %d; rest is literal", opener.type, opener.start)
            return None

        if opener.type == lx.FOREACH_OPEN:
            header = LOOP_HEADER.match(opener.value)
            return LoopNode(
                collection=header.group(1).strip(),
                item_name=header.group(2),
                children=tuple(children),
            )
        return ConditionalNode(
            expression=opener.value.strip(),
            negate=opener.type == lx.UNLESS_OPEN,
            children=tuple(children),
        )

    def _skip_block(self, opener: TemplateToken) -> Optional[int]:
        """
        Consumes tokens up to the closer matching ``opener`` without recursing.

        Returns:
            End offset of the matching closer, or None if there is none
        """
        expected = [_CLOSER_FOR[opener.type]]
        while expected:
            token = self._advance()
            if token.type == lx.EOF:
                return None
            if token.type in _CLOSER_FOR:
                if _opens_block(token):
                    expected.append(_CLOSER_FOR[token.type])
            elif token.type == expected[-1]:
                expected.pop()
        return token.end

    def _advance(self) -> TemplateToken:
        token = self._tokens[self._position]
        if token.type != lx.EOF:
            self._position += 1
        return token


def _opens_block(token: TemplateToken) -> bool:
    """False for an @foreach whose header is not `<expr> as <name>`."""
    return token.type != lx.FOREACH_OPEN or LOOP_HEADER.match(token.value) is not None


def _append_text(nodes: List[TemplateNode], text: str) -> None:
    """Appends text, merging with a preceding TextNode."""
    if not text:
        return
    if nodes and isinstance(nodes[-1], TextNode):
        nodes[-1] = TextNode(text=nodes[-1].text + text)
    else:
        nodes.append(TextNode(text=text))


def parse_interpolation(body: str) -> Optional[InterpolationNode]:
    """
    Splits ``expr | filter | filter(arg)`` into an InterpolationNode.

    Returns:
        The node, or None if the expression is empty or a filter is malformed
    """
    parts = split_top_level(body, "|")
    expression = parts[0].strip()
    if not expression:
        return None

    filters: List[FilterSpec] = []
    for part in parts[1:]:
        match = FILTER_TOKEN.match(part.strip())
        if match is None:
            return None
        argument = match.group(2)
        if argument is not None:
            argument = argument.strip() or None
        filters.append(FilterSpec(name=match.group(1), argument=argument))

    return InterpolationNode(expression=expression, filters=tuple(filters))


def parse_template(text: str) -> BlockNode:
    """
    Parses template text into an immutable tree.

    Pure function: the same text always yields an equal tree.
    """
    return TemplateParser(text).parse()


__all__ = ["TemplateParser", "parse_template", "parse_interpolation"]
