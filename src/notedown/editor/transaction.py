"""Editor state, selections, and transactions.

A :class:`Transaction` starts from an immutable document and accumulates
steps.  Every step is applied immediately (``tr.doc`` is always the
current result), its position map is appended to ``tr.mapping``, and the
selection is mapped through it.  Helpers build the common steps from
plain positions so callers never assemble steps by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from notedown.errors import NotedownSchemaError
from notedown.editor.positions import resolve, resolve_inline
from notedown.editor.steps import (
    AddMarkStep,
    JoinBlocksStep,
    Mapping,
    RemoveMarkStep,
    ReplaceBlocksStep,
    ReplaceInlineStep,
    SetBlockTypeStep,
    SplitBlockStep,
    Step,
    StepMap,
)
from notedown.schema import (
    HeadingAttrs,
    Mark,
    MarkKind,
    Node,
    NodeKind,
    Slice,
    fragment_size,
    paragraph,
    text,
)


@dataclass(frozen=True)
class Selection:
    """A text selection.  ``anchor == head`` is a plain caret."""

    anchor: int
    head: int

    @classmethod
    def caret(cls, pos: int) -> Selection:
        return cls(pos, pos)

    @property
    def from_(self) -> int:
        return min(self.anchor, self.head)

    @property
    def to(self) -> int:
        return max(self.anchor, self.head)

    @property
    def empty(self) -> bool:
        return self.anchor == self.head

    def map(self, step_map: StepMap | Mapping) -> Selection:
        return Selection(step_map.map(self.anchor), step_map.map(self.head))


@dataclass(frozen=True)
class EditorState:
    """An immutable snapshot of the document and selection."""

    doc: Node
    selection: Selection

    @property
    def tr(self) -> Transaction:
        """Start a new transaction from this state."""
        return Transaction(self.doc, self.selection)

    def apply(self, tr: Transaction) -> EditorState:
        return EditorState(tr.doc, tr.selection)


class Transaction:
    """An atomic batch of steps plus the resulting selection."""

    def __init__(self, doc: Node, selection: Selection | None = None) -> None:
        self.before: Node = doc
        self.doc: Node = doc
        self.steps: list[Step] = []
        self.docs: list[Node] = []
        self.mapping: Mapping = Mapping()
        self.selection: Selection = selection if selection is not None else Selection.caret(0)
        self.meta: dict[str, Any] = {}

    @property
    def doc_changed(self) -> bool:
        return bool(self.steps)

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    def step(self, step: Step) -> Transaction:
        """Apply *step* to the current document and record it."""
        new_doc = step.apply(self.doc)
        step_map = step.get_map()
        self.docs.append(self.doc)
        self.steps.append(step)
        self.mapping.append(step_map)
        self.doc = new_doc
        self.selection = self.selection.map(step_map)
        return self

    def extend(self, other: Transaction) -> Transaction:
        """Append the steps of *other*, which must start from ``self.doc``."""
        if other.before is not self.doc and other.before != self.doc:
            raise ValueError("Cannot extend a transaction with one rooted at a different document")
        self.docs.extend(other.docs)
        self.steps.extend(other.steps)
        for step_map in other.mapping.maps:
            self.mapping.append(step_map)
        self.doc = other.doc
        self.selection = other.selection
        self.meta.update(other.meta)
        return self

    def set_selection(self, selection: Selection | int) -> Transaction:
        if isinstance(selection, int):
            selection = Selection.caret(selection)
        self.selection = selection
        return self

    def set_meta(self, key: str, value: Any) -> Transaction:
        self.meta[key] = value
        return self

    def inverted_steps(self) -> list[Step]:
        """Return steps that undo this transaction, in application order."""
        return [
            step.invert(doc) for step, doc in reversed(list(zip(self.steps, self.docs)))
        ]

    # ------------------------------------------------------------------
    # Inline edits
    # ------------------------------------------------------------------

    def insert(self, pos: int, nodes: tuple[Node, ...]) -> Transaction:
        """Insert inline *nodes* at *pos*."""
        return self.step(ReplaceInlineStep(pos, pos, nodes))

    def insert_text(self, value: str, from_: int | None = None, to: int | None = None) -> Transaction:
        """Replace ``from_..to`` (the selection by default) with *value*.

        The caret ends up after the inserted text.  Inserted text carries
        no marks, so typing next to a link never extends it.
        """
        if from_ is None:
            self.delete_selection()
            from_ = to = self.selection.head
        elif to is None:
            to = from_
        if to != from_:
            self.delete(from_, to)
        if value:
            self.step(ReplaceInlineStep(from_, from_, (text(value),)))
        return self.set_selection(from_ + len(value))

    def delete(self, from_: int, to: int) -> Transaction:
        """Delete the range ``from_..to``, joining blocks it crosses."""
        if to < from_:
            from_, to = to, from_
        if from_ == to:
            return self
        start = resolve(self.doc, from_)
        end = resolve(self.doc, to)
        if start.depth == 1 and start.same_parent(end):
            self.step(ReplaceInlineStep(from_, to))
            return self.set_selection(from_)

        # Back to front, so earlier positions stay valid.
        if end.depth == 1 and to > end.start:
            self.step(ReplaceInlineStep(end.start, to))
        blocks_from = start.block_end if start.depth == 1 else from_
        blocks_to = end.block_start if end.depth == 1 else to
        if blocks_to > blocks_from:
            self.step(ReplaceBlocksStep(blocks_from, blocks_to))
        if start.depth == 1 and from_ < start.end:
            self.step(ReplaceInlineStep(from_, start.end))
        if start.depth == 1 and end.depth == 1:
            self.step(JoinBlocksStep(from_ + 1))
            return self.set_selection(from_)
        if end.depth == 1:
            return self.set_selection(from_ + 1)
        if start.depth == 1:
            return self.set_selection(from_)
        return self._select_near_boundary(from_)

    def _select_near_boundary(self, pos: int) -> Transaction:
        """Put the caret in a block next to the boundary *pos*.

        The caret goes to the start of the next block, or the end of the
        previous one at the end of the document.  A document left without
        blocks gets one empty paragraph.
        """
        if not self.doc.content:
            self.replace_blocks(0, 0, (paragraph(),))
            return self.set_selection(1)
        if pos < self.doc.content_size:
            return self.set_selection(pos + 1)
        return self.set_selection(pos - 1)

    def delete_selection(self) -> Transaction:
        if not self.selection.empty:
            self.delete(self.selection.from_, self.selection.to)
        return self

    # ------------------------------------------------------------------
    # Block edits
    # ------------------------------------------------------------------

    def split(
        self,
        pos: int,
        kind: NodeKind | None = None,
        attrs: HeadingAttrs | None = None,
        consume_break: bool = False,
    ) -> Transaction:
        return self.step(SplitBlockStep(pos, kind, attrs, consume_break))

    def join(self, pos: int, insert_break: bool = False) -> Transaction:
        return self.step(JoinBlocksStep(pos, insert_break))

    def set_block_type(self, pos: int, kind: NodeKind, attrs: HeadingAttrs | None = None) -> Transaction:
        return self.step(SetBlockTypeStep(pos, kind, attrs))

    def replace_blocks(self, from_: int, to: int, blocks: tuple[Node, ...]) -> Transaction:
        return self.step(ReplaceBlocksStep(from_, to, blocks))

    # ------------------------------------------------------------------
    # Marks
    # ------------------------------------------------------------------

    def add_mark(self, from_: int, to: int, mark: Mark) -> Transaction:
        return self.step(AddMarkStep(from_, to, mark))

    def remove_mark(self, from_: int, to: int, kind: MarkKind | None = None) -> Transaction:
        """Remove marks (of *kind*, or all kinds) from text in ``from_..to``.

        One step is emitted per contiguous run carrying the same mark, so
        each step inverts exactly.
        """
        runs: list[tuple[int, int, Mark]] = []
        for node, pos, _ in self.doc.descendants():
            if not node.is_text:
                continue
            lo, hi = max(pos, from_), min(pos + node.node_size, to)
            if lo >= hi:
                continue
            for mark in node.marks:
                if kind is not None and mark.kind is not kind:
                    continue
                if runs and runs[-1][2] == mark and runs[-1][1] == lo:
                    runs[-1] = (runs[-1][0], hi, mark)
                else:
                    runs.append((lo, hi, mark))
        for lo, hi, mark in runs:
            self.step(RemoveMarkStep(lo, hi, mark))
        return self

    # ------------------------------------------------------------------
    # Slices
    # ------------------------------------------------------------------

    def replace_selection_with_slice(self, slice_: Slice) -> Transaction:
        """Insert *slice_* in place of the selection.

        Inline fragments, and a single block open on both sides, merge
        into the caret's block.  Closed blocks are placed around the
        caret's block (or replace it when it is empty); otherwise the
        block is split and open edge blocks merge with the two halves.

        An open first block merges into the text before the caret even when
        it is a heading, the same as typing its text there would.  Pasting
        ``"# T"`` in the middle of a line therefore does not make a heading.
        """
        self.delete_selection()
        if not slice_.content:
            return self
        pos = self.selection.head
        rpos = resolve_inline(self.doc, pos)

        if slice_.is_inline:
            self.insert(pos, slice_.content)
            return self.set_selection(pos + slice_.size)
        if not all(node.is_block for node in slice_.content):
            raise NotedownSchemaError(
                "Slice mixes block and inline nodes",
                context={"field": "content"},
            )

        blocks = slice_.content
        open_start = slice_.open_start > 0
        open_end = slice_.open_end > 0
        if len(blocks) == 1 and open_start and open_end:
            self.insert(pos, blocks[0].content)
            return self.set_selection(pos + blocks[0].content_size)

        if not open_start and not open_end:
            size = fragment_size(blocks)
            parent = rpos.parent
            if parent.content_size == 0:
                self.replace_blocks(rpos.block_start, rpos.block_end, blocks)
                return self.set_selection(rpos.block_start + size - 1)
            if rpos.parent_offset == 0:
                self.replace_blocks(rpos.block_start, rpos.block_start, blocks)
                return self.set_selection(rpos.block_start + size - 1)
            if rpos.parent_offset == parent.content_size:
                self.replace_blocks(rpos.block_end, rpos.block_end, blocks)
                return self.set_selection(rpos.block_end + size - 1)

        head = blocks[0].content if open_start else ()
        tail_block = blocks[-1] if open_end else None
        middle = blocks[(1 if open_start else 0):len(blocks) - (1 if open_end else 0)]

        if head:
            self.insert(pos, head)
            pos += fragment_size(head)
        if tail_block is not None:
            self.split(pos, tail_block.kind, tail_block.attrs)
        else:
            self.split(pos)
        boundary = pos + 1
        if middle:
            self.replace_blocks(boundary, boundary, middle)
            boundary += fragment_size(middle)
        tail_start = boundary + 1
        if tail_block is not None and tail_block.content:
            self.insert(tail_start, tail_block.content)
            return self.set_selection(tail_start + tail_block.content_size)
        if tail_block is None and middle:
            return self.set_selection(boundary - 1)
        return self.set_selection(tail_start)
