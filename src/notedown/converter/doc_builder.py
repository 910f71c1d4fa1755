"""Build a document tree from scanner output.

Tokens of one block are collected into a paragraph buffer; a heading
token flushes the buffer and stands as its own block.  Heading text keeps
its hash prefix, which is what the normalization engine classifies on.
"""

from __future__ import annotations

from collections.abc import Iterable

from notedown.models import HeadingToken, LineBreakToken, TextToken, TokenBlock, UrlToken
from notedown.schema import (
    MAX_HEADING_LEVEL,
    Node,
    NodeKind,
    doc,
    hard_break,
    heading,
    link,
    paragraph,
    text,
)


def clamp_level(level: int) -> int:
    return max(1, min(level, MAX_HEADING_LEVEL))


def build_doc(blocks: Iterable[TokenBlock]) -> Node:
    """Convert scanned token blocks to a document node.

    Parameters
    ----------
    blocks:
        Output of :func:`~notedown.converter.scanner.scan_markdown`.

    Returns
    -------
    Node
        A ``doc`` node whose children are headings and paragraphs, in
        token order.  Empty input yields an empty doc.
    """
    return doc(*build_blocks(blocks))


def build_blocks(blocks: Iterable[TokenBlock]) -> list[Node]:
    """Convert scanned token blocks to a flat list of block nodes."""
    nodes: list[Node] = []
    for tokens in blocks:
        buffer: list[Node] = []
        for token in tokens:
            if isinstance(token, HeadingToken):
                _flush(buffer, nodes)
                buffer = []
                nodes.append(heading(clamp_level(token.level), token.content))
            elif isinstance(token, TextToken):
                if token.content:
                    buffer.append(text(token.content))
            elif isinstance(token, LineBreakToken):
                buffer.append(hard_break())
            elif isinstance(token, UrlToken):
                buffer.append(text(token.content, [link(token.content)]))
        _flush(buffer, nodes)
    return nodes


def _flush(buffer: list[Node], nodes: list[Node]) -> None:
    """Append *buffer* as a paragraph, dropping breaks at either edge.

    A break next to a heading line only marks the line boundary that the
    block boundary already represents.
    """
    start, end = 0, len(buffer)
    while start < end and buffer[start].kind is NodeKind.HARD_BREAK:
        start += 1
    while end > start and buffer[end - 1].kind is NodeKind.HARD_BREAK:
        end -= 1
    if start < end:
        nodes.append(paragraph(*buffer[start:end]))
