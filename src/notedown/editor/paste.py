"""Sanitize pasted fragments before insertion.

Content from the system clipboard is untrusted: it may carry links the
text does not justify, headings without visible hashes, or runs of
hard breaks.  :func:`sanitize_paste` rewrites such a fragment so that,
once inserted, the document invariants hold without waiting for another
edit.
"""

from __future__ import annotations

from collections.abc import Iterable

from notedown.config import NotedownConfig
from notedown.converter.scanner import heading_level
from notedown.schema import (
    MarkKind,
    Node,
    NodeKind,
    Slice,
    heading,
    normalize_inline,
    paragraph,
)


def sanitize_paste(slice_: Slice, config: NotedownConfig | None = None) -> Slice:
    """Return a sanitized copy of *slice_*.

    The fragment is walked top-down:

    * consecutive hard breaks collapse to one;
    * a heading gets a ``"#" * level + " "`` prefix unless its text is
      already heading-shaped, in which case the text decides the level;
    * a single-line paragraph, or a bare top-level text node, whose text
      is heading-shaped becomes a heading;
    * link marks are dropped when ``config.paste_link_policy`` is
      ``"strip"``.

    If headings appear among top-level inline nodes, the remaining inline
    runs are wrapped in paragraphs and the slice is closed on both sides.

    Parameters
    ----------
    slice_:
        The fragment to sanitize.  It is not modified.
    config:
        Supplies the link policy.  Defaults to :class:`NotedownConfig`.
    """
    config = config or NotedownConfig()
    strip_links = config.paste_link_policy == "strip"

    content = _sanitize_children(slice_.content, strip_links, top_level=True)
    if not content:
        return Slice.EMPTY

    has_blocks = any(node.is_block for node in content)
    has_inline = any(node.is_inline for node in content)
    if has_blocks and has_inline:
        return Slice(tuple(_wrap_inline_runs(content)), open_start=0, open_end=0)
    if has_inline:
        return Slice(content, open_start=0, open_end=0)
    return Slice(content, open_start=slice_.open_start, open_end=slice_.open_end)


def _sanitize_children(nodes: Iterable[Node], strip_links: bool, top_level: bool = False) -> tuple[Node, ...]:
    result: list[Node] = []
    for node in nodes:
        if node.kind is NodeKind.HARD_BREAK and result and result[-1].kind is NodeKind.HARD_BREAK:
            continue
        result.append(_sanitize_node(node, strip_links, top_level))
    return normalize_inline(result)


def _sanitize_node(node: Node, strip_links: bool, top_level: bool) -> Node:
    if node.kind is NodeKind.HEADING:
        return _sanitize_heading(node)

    if node.kind is NodeKind.TEXT:
        if strip_links and node.mark(MarkKind.LINK) is not None:
            node = node.with_marks(m for m in node.marks if m.kind is not MarkKind.LINK)
        if top_level:
            level = heading_level(node.text)  # type: ignore[arg-type]
            if level is not None:
                return heading(level, node.text)  # type: ignore[arg-type]
        return node

    if node.kind is NodeKind.PARAGRAPH:
        content = _sanitize_children(node.content, strip_links)
        if not any(child.kind is NodeKind.HARD_BREAK for child in content):
            value = "".join(child.text_content for child in content)
            level = heading_level(value)
            if level is not None:
                return heading(level, value)
        return node.copy(content)

    if node.content:
        return node.copy(_sanitize_children(node.content, strip_links))
    return node


def _sanitize_heading(node: Node) -> Node:
    value = node.text_content
    level = heading_level(value)
    if level is not None:
        return heading(level, value)
    stored = node.level or 1
    return heading(stored, "#" * stored + " " + value)


def _wrap_inline_runs(nodes: Iterable[Node]) -> list[Node]:
    blocks: list[Node] = []
    run: list[Node] = []

    def flush() -> None:
        start, end = 0, len(run)
        while start < end and run[start].kind is NodeKind.HARD_BREAK:
            start += 1
        while end > start and run[end - 1].kind is NodeKind.HARD_BREAK:
            end -= 1
        if start < end:
            blocks.append(paragraph(*run[start:end]))
        run.clear()

    for node in nodes:
        if node.is_inline:
            run.append(node)
        else:
            flush()
            blocks.append(node)
    flush()
    return blocks
