"""Resolve integer document positions into structural context."""

from __future__ import annotations

from dataclasses import dataclass

from notedown.errors import NotedownUnresolvablePositionError
from notedown.schema import Node, cut_inline


@dataclass(frozen=True)
class ResolvedPos:
    """A position together with the nodes around it.

    Attributes
    ----------
    pos:
        The absolute position.
    depth:
        ``0`` when the position sits between blocks, ``1`` when it sits
        inside a block's inline content.
    index:
        Index of the block containing the position (depth 1) or of the
        block directly after it (depth 0).
    parent:
        The enclosing block at depth 1, the document at depth 0.
    parent_offset:
        Offset of the position inside ``parent``'s content.
    block_start:
        Position directly before the enclosing block (depth 1) or equal to
        ``pos`` (depth 0).
    node_before / node_after:
        The sibling directly before/after the position.  Text nodes are cut
        at the position, so ``node_before`` of a caret in the middle of a
        word holds only the characters before it.
    """

    pos: int
    depth: int
    index: int
    parent: Node
    parent_offset: int
    block_start: int
    node_before: Node | None
    node_after: Node | None

    @property
    def start(self) -> int:
        """Position of the start of the parent's content."""
        return self.block_start + 1 if self.depth == 1 else 0

    @property
    def end(self) -> int:
        """Position of the end of the parent's content."""
        return self.start + self.parent.content_size

    @property
    def block_end(self) -> int:
        """Position directly after the enclosing block (depth 1)."""
        return self.end + 1 if self.depth == 1 else self.pos

    def same_parent(self, other: ResolvedPos) -> bool:
        return self.depth == other.depth and (
            self.depth == 0 or self.block_start == other.block_start
        )


def resolve(doc: Node, pos: int) -> ResolvedPos:
    """Resolve *pos* against *doc*.

    Raises
    ------
    NotedownUnresolvablePositionError
        If *pos* lies outside ``0..doc.content_size``.
    """
    size = doc.content_size
    if not isinstance(pos, int) or pos < 0 or pos > size:
        raise NotedownUnresolvablePositionError(
            f"Position {pos!r} is outside the document (size {size})",
            context={"pos": pos, "size": size, "reason": "out_of_range"},
        )

    offset = 0
    for index, child in enumerate(doc.content):
        end = offset + child.node_size
        if pos == offset:
            before = doc.content[index - 1] if index else None
            return ResolvedPos(pos, 0, index, doc, pos, pos, before, child)
        if pos < end:
            inner = pos - offset - 1
            return ResolvedPos(
                pos,
                1,
                index,
                child,
                inner,
                offset,
                _inline_before(child, inner),
                _inline_after(child, inner),
            )
        offset = end

    before = doc.content[-1] if doc.content else None
    return ResolvedPos(pos, 0, len(doc.content), doc, pos, pos, before, None)


def resolve_inline(doc: Node, pos: int) -> ResolvedPos:
    """Resolve *pos* and require it to sit inside a block.

    Raises
    ------
    NotedownUnresolvablePositionError
        If *pos* is out of range or between blocks.
    """
    rpos = resolve(doc, pos)
    if rpos.depth != 1:
        raise NotedownUnresolvablePositionError(
            f"Position {pos} is not inside a text block",
            context={"pos": pos, "size": doc.content_size, "reason": "between_blocks"},
        )
    return rpos


def resolve_boundary(doc: Node, pos: int) -> ResolvedPos:
    """Resolve *pos* and require it to sit between blocks.

    Raises
    ------
    NotedownUnresolvablePositionError
        If *pos* is out of range or inside a block.
    """
    rpos = resolve(doc, pos)
    if rpos.depth != 0:
        raise NotedownUnresolvablePositionError(
            f"Position {pos} is not a block boundary",
            context={"pos": pos, "size": doc.content_size, "reason": "inside_block"},
        )
    return rpos


def _inline_before(block: Node, offset: int) -> Node | None:
    if offset == 0:
        return None
    nodes = cut_inline(block.content, 0, offset)
    return nodes[-1] if nodes else None


def _inline_after(block: Node, offset: int) -> Node | None:
    nodes = cut_inline(block.content, offset)
    return nodes[0] if nodes else None
