"""Document tree to Markdown serializer.

Usage::

    from notedown.converter.md_serializer import MarkdownSerializer

    md = MarkdownSerializer().serialize(doc)

Headings are written as their text (which already carries the hash
prefix), paragraphs as their inline content with hard breaks as single
newlines and linked text as its ``href``.  Every block ends with a blank
line.
"""

from __future__ import annotations

from collections.abc import Callable as _Callable

from notedown.errors import NotedownUnknownNodeKindError
from notedown.schema import MarkKind, Node, NodeKind


class MarkdownSerializer:
    """Stateless serializer from a ``doc`` node to Markdown text."""

    def serialize(self, doc: Node) -> str:
        """Serialize every top-level block of *doc*.

        Raises
        ------
        NotedownUnknownNodeKindError
            If a top-level node is not a heading or a paragraph.
        """
        parts: list[str] = []
        for index, block in enumerate(doc.content):
            serializer = _BLOCK_SERIALIZERS.get(block.kind)
            if serializer is None:
                raise NotedownUnknownNodeKindError(
                    f"Unknown node type: {block.kind.value}",
                    context={"kind": block.kind.value, "index": index},
                )
            parts.append(serializer(self, block))
        return "".join(parts)

    # ------------------------------------------------------------------
    # Block serializers
    # ------------------------------------------------------------------

    def _serialize_heading(self, block: Node) -> str:
        return f"{block.text_content}\n\n"

    def _serialize_paragraph(self, block: Node) -> str:
        parts: list[str] = []
        for inline in block.content:
            if inline.kind is NodeKind.HARD_BREAK:
                parts.append("\n")
                continue
            link_mark = inline.mark(MarkKind.LINK)
            parts.append(link_mark.href if link_mark is not None else inline.text_content)
        return "".join(parts) + "\n\n"


_BLOCK_SERIALIZERS: dict[NodeKind, _Callable[[MarkdownSerializer, Node], str]] = {
    NodeKind.HEADING: MarkdownSerializer._serialize_heading,
    NodeKind.PARAGRAPH: MarkdownSerializer._serialize_paragraph,
}


def serialize_markdown(doc: Node) -> str:
    """Serialize *doc* to Markdown.  See :class:`MarkdownSerializer`."""
    return MarkdownSerializer().serialize(doc)
