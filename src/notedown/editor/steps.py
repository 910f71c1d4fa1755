"""Invertible, position-mapped edit steps.

A step is a single structural edit applied to an immutable document.
Applying a step returns a new document; :meth:`Step.get_map` describes
how the step shifts positions so that later positions (the caret, or
positions computed against an earlier document) can be remapped.

Step catalogue:

- :class:`ReplaceInlineStep`: replace an inline range inside one block.
- :class:`SplitBlockStep`: split a block in two, optionally consuming
  the hard break at the split point.
- :class:`JoinBlocksStep`: join two adjacent blocks, optionally
  re-inserting a hard break between them.
- :class:`ReplaceBlocksStep`: replace a run of whole blocks.
- :class:`SetBlockTypeStep`: change a block's kind and attributes.
- :class:`AddMarkStep` / :class:`RemoveMarkStep`: mark text in a range.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from notedown.errors import NotedownSchemaError, NotedownUnresolvablePositionError
from notedown.editor.positions import resolve, resolve_boundary, resolve_inline
from notedown.schema import (
    HeadingAttrs,
    Mark,
    Node,
    NodeKind,
    add_mark,
    block,
    cut_inline,
    fragment_size,
    hard_break,
    normalize_inline,
    remove_mark,
)

# ---------------------------------------------------------------------------
# Position maps
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StepMap:
    """Describes a single replaced range: ``old_size`` positions starting
    at ``start`` became ``new_size`` positions."""

    start: int = 0
    old_size: int = 0
    new_size: int = 0

    def map(self, pos: int, assoc: int = 1) -> int:
        """Map *pos* through this step.

        Positions inside a deleted range collapse to its start, or to its
        end when *assoc* is positive.  A position exactly at an insertion
        point moves after the inserted content when *assoc* is positive.
        """
        start, old, new = self.start, self.old_size, self.new_size
        end = start + old
        if pos < start or (old == 0 and new == 0):
            return pos
        if pos > end:
            return pos + new - old
        if old == 0:
            return start + new if assoc > 0 else start
        if pos == start:
            return start
        if pos == end:
            return start + new
        return start + new if assoc > 0 else start

    def invert(self) -> StepMap:
        return StepMap(self.start, self.new_size, self.old_size)


IDENTITY_MAP = StepMap()


@dataclass
class Mapping:
    """An ordered pipeline of step maps."""

    maps: list[StepMap] = field(default_factory=list)

    def append(self, step_map: StepMap) -> None:
        self.maps.append(step_map)

    def map(self, pos: int, assoc: int = 1) -> int:
        for step_map in self.maps:
            pos = step_map.map(pos, assoc)
        return pos

    def slice(self, start: int = 0, end: int | None = None) -> Mapping:
        return Mapping(self.maps[start:end])

    def __len__(self) -> int:
        return len(self.maps)


# ---------------------------------------------------------------------------
# Base step
# ---------------------------------------------------------------------------

class Step(ABC):
    """Abstract base for every edit step."""

    @abstractmethod
    def apply(self, doc: Node) -> Node:
        """Return the document produced by applying this step to *doc*.

        Raises
        ------
        NotedownUnresolvablePositionError
            If a position of the step does not fit *doc*.
        NotedownSchemaError
            If the result would violate the document schema.
        """

    @abstractmethod
    def get_map(self) -> StepMap:
        """Return the position map of this step."""

    @abstractmethod
    def invert(self, doc: Node) -> Step:
        """Return the step that undoes this one.

        *doc* is the document this step was applied to.
        """


def _checked(doc: Node) -> Node:
    doc.check()
    return doc


def _require_inline(nodes: Iterable[Node], step: str) -> tuple[Node, ...]:
    nodes = tuple(nodes)
    for node in nodes:
        if not node.is_inline:
            raise NotedownSchemaError(
                f"{step} only accepts inline content, got '{node.kind.value}'",
                context={"kind": node.kind.value, "field": "content"},
            )
    return nodes


def _require_blocks(nodes: Iterable[Node], step: str) -> tuple[Node, ...]:
    nodes = tuple(nodes)
    for node in nodes:
        if not node.is_block:
            raise NotedownSchemaError(
                f"{step} only accepts blocks, got '{node.kind.value}'",
                context={"kind": node.kind.value, "field": "content"},
            )
    return nodes


# ---------------------------------------------------------------------------
# Inline replacement
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReplaceInlineStep(Step):
    """Replace the inline range ``from_..to`` of one block with *content*.

    Covers typing (empty range), deleting inside a block (empty content),
    and inserting hard breaks or pasted inline runs.
    """

    from_: int
    to: int
    content: tuple[Node, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "content", _require_inline(self.content, "ReplaceInlineStep"))

    def apply(self, doc: Node) -> Node:
        start = resolve_inline(doc, self.from_)
        end = resolve_inline(doc, self.to)
        if not start.same_parent(end) or self.to < self.from_:
            raise NotedownUnresolvablePositionError(
                f"Range {self.from_}..{self.to} does not lie inside one block",
                context={"pos": self.from_, "size": doc.content_size, "reason": "cross_block"},
            )
        old = start.parent.content
        new_content = normalize_inline(
            cut_inline(old, 0, start.parent_offset)
            + self.content
            + cut_inline(old, end.parent_offset)
        )
        return _checked(doc.replace_child(start.index, start.parent.copy(new_content)))

    def get_map(self) -> StepMap:
        return StepMap(self.from_, self.to - self.from_, fragment_size(self.content))

    def invert(self, doc: Node) -> Step:
        start = resolve_inline(doc, self.from_)
        end_offset = start.parent_offset + (self.to - self.from_)
        removed = cut_inline(start.parent.content, start.parent_offset, end_offset)
        return ReplaceInlineStep(self.from_, self.from_ + fragment_size(self.content), removed)


# ---------------------------------------------------------------------------
# Split / join
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SplitBlockStep(Step):
    """Split the block containing *pos* into two blocks.

    The second block gets *kind*/*attrs* when given, otherwise the first
    block's markup.  With ``consume_break`` the hard break directly after
    *pos* is removed and replaced by the block boundary; a caret placed
    right after that break lands at the start of the second block.
    """

    pos: int
    kind: NodeKind | None = None
    attrs: HeadingAttrs | None = None
    consume_break: bool = False

    def apply(self, doc: Node) -> Node:
        rpos = resolve_inline(doc, self.pos)
        parent = rpos.parent
        tail_offset = rpos.parent_offset
        if self.consume_break:
            if rpos.node_after is None or rpos.node_after.kind is not NodeKind.HARD_BREAK:
                raise NotedownUnresolvablePositionError(
                    f"No hard break after position {self.pos} to split on",
                    context={"pos": self.pos, "size": doc.content_size, "reason": "no_break"},
                )
            tail_offset += 1
        head = parent.copy(cut_inline(parent.content, 0, rpos.parent_offset))
        rest = cut_inline(parent.content, tail_offset)
        if self.kind is None:
            tail = parent.copy(rest)
        else:
            tail = block(self.kind, rest, self.attrs)
        return _checked(doc.replace_child(rpos.index, head, tail))

    def get_map(self) -> StepMap:
        return StepMap(self.pos, 1 if self.consume_break else 0, 2)

    def invert(self, doc: Node) -> Step:
        resolve_inline(doc, self.pos)
        return JoinBlocksStep(self.pos + 1, insert_break=self.consume_break)


@dataclass(frozen=True)
class JoinBlocksStep(Step):
    """Join the blocks on either side of the boundary *pos*.

    The joined block keeps the first block's markup.  With
    ``insert_break`` a hard break is placed where the boundary was.
    """

    pos: int
    insert_break: bool = False

    def apply(self, doc: Node) -> Node:
        rpos = resolve_boundary(doc, self.pos)
        if rpos.node_before is None or rpos.node_after is None:
            raise NotedownUnresolvablePositionError(
                f"Position {self.pos} does not sit between two blocks",
                context={"pos": self.pos, "size": doc.content_size, "reason": "no_sibling"},
            )
        first, second = rpos.node_before, rpos.node_after
        middle = (hard_break(),) if self.insert_break else ()
        joined = first.copy(normalize_inline(first.content + middle + second.content))
        index = rpos.index - 1
        return _checked(doc.copy(doc.content[:index] + (joined,) + doc.content[index + 2:]))

    def get_map(self) -> StepMap:
        return StepMap(self.pos - 1, 2, 1 if self.insert_break else 0)

    def invert(self, doc: Node) -> Step:
        rpos = resolve_boundary(doc, self.pos)
        second = rpos.node_after
        if second is None:
            raise NotedownUnresolvablePositionError(
                f"Position {self.pos} does not sit before a block",
                context={"pos": self.pos, "size": doc.content_size, "reason": "no_sibling"},
            )
        return SplitBlockStep(
            self.pos - 1,
            kind=second.kind,
            attrs=second.attrs,
            consume_break=self.insert_break,
        )


# ---------------------------------------------------------------------------
# Whole blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReplaceBlocksStep(Step):
    """Replace the blocks between boundaries ``from_`` and ``to`` with *blocks*."""

    from_: int
    to: int
    blocks: tuple[Node, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "blocks", _require_blocks(self.blocks, "ReplaceBlocksStep"))

    def apply(self, doc: Node) -> Node:
        start = resolve_boundary(doc, self.from_)
        end = resolve_boundary(doc, self.to)
        if end.index < start.index:
            raise NotedownUnresolvablePositionError(
                f"Range {self.from_}..{self.to} is reversed",
                context={"pos": self.from_, "size": doc.content_size, "reason": "reversed"},
            )
        content = doc.content[:start.index] + self.blocks + doc.content[end.index:]
        return _checked(doc.copy(content))

    def get_map(self) -> StepMap:
        return StepMap(self.from_, self.to - self.from_, fragment_size(self.blocks))

    def invert(self, doc: Node) -> Step:
        start = resolve_boundary(doc, self.from_)
        end = resolve_boundary(doc, self.to)
        removed = doc.content[start.index:end.index]
        return ReplaceBlocksStep(self.from_, self.from_ + fragment_size(self.blocks), removed)


@dataclass(frozen=True)
class SetBlockTypeStep(Step):
    """Change the kind and attributes of the block starting at *pos*.

    Content is kept as is, so positions map identically.
    """

    pos: int
    kind: NodeKind
    attrs: HeadingAttrs | None = None

    def apply(self, doc: Node) -> Node:
        rpos = resolve_boundary(doc, self.pos)
        target = rpos.node_after
        if target is None:
            raise NotedownUnresolvablePositionError(
                f"No block starts at position {self.pos}",
                context={"pos": self.pos, "size": doc.content_size, "reason": "no_block"},
            )
        return _checked(doc.replace_child(rpos.index, block(self.kind, target.content, self.attrs)))

    def get_map(self) -> StepMap:
        return IDENTITY_MAP

    def invert(self, doc: Node) -> Step:
        target = resolve_boundary(doc, self.pos).node_after
        if target is None:
            raise NotedownUnresolvablePositionError(
                f"No block starts at position {self.pos}",
                context={"pos": self.pos, "size": doc.content_size, "reason": "no_block"},
            )
        return SetBlockTypeStep(self.pos, target.kind, target.attrs)


# ---------------------------------------------------------------------------
# Marks
# ---------------------------------------------------------------------------

def _map_text_range(
    doc: Node,
    from_: int,
    to: int,
    update: Callable[[Node], Node],
) -> Node:
    """Apply *update* to every text piece between *from_* and *to*."""
    resolve(doc, from_)
    resolve(doc, to)
    blocks: list[Node] = []
    for _, pos, child in doc.blocks():
        start = pos + 1
        end = start + child.content_size
        lo, hi = max(from_, start), min(to, end)
        if lo >= hi:
            blocks.append(child)
            continue
        lo_off, hi_off = lo - start, hi - start
        middle = tuple(
            update(node) if node.is_text else node
            for node in cut_inline(child.content, lo_off, hi_off)
        )
        content = normalize_inline(
            cut_inline(child.content, 0, lo_off) + middle + cut_inline(child.content, hi_off)
        )
        blocks.append(child.copy(content))
    return _checked(doc.copy(blocks))


@dataclass(frozen=True)
class AddMarkStep(Step):
    """Add *mark* to all text between ``from_`` and ``to``."""

    from_: int
    to: int
    mark: Mark

    def apply(self, doc: Node) -> Node:
        return _map_text_range(
            doc, self.from_, self.to,
            lambda node: node.with_marks(add_mark(node.marks, self.mark)),
        )

    def get_map(self) -> StepMap:
        return IDENTITY_MAP

    def invert(self, doc: Node) -> Step:
        return RemoveMarkStep(self.from_, self.to, self.mark)


@dataclass(frozen=True)
class RemoveMarkStep(Step):
    """Remove *mark* from all text between ``from_`` and ``to``."""

    from_: int
    to: int
    mark: Mark

    def apply(self, doc: Node) -> Node:
        return _map_text_range(
            doc, self.from_, self.to,
            lambda node: node.with_marks(remove_mark(node.marks, self.mark)),
        )

    def get_map(self) -> StepMap:
        return IDENTITY_MAP

    def invert(self, doc: Node) -> Step:
        return AddMarkStep(self.from_, self.to, self.mark)


def describe_step(step: Step) -> dict:
    """Return a JSON-friendly description of *step* (used for debug dumps)."""
    result: dict = {"step": type(step).__name__}
    for name, value in vars(step).items():
        if name == "content" or name == "blocks":
            result[name] = [node.kind.value for node in value]
        elif isinstance(value, Mark):
            result[name] = {"kind": value.kind.value, "href": value.href}
        elif isinstance(value, HeadingAttrs):
            result[name] = {"level": value.level}
        elif isinstance(value, NodeKind):
            result[name] = value.value
        else:
            result[name] = value
    return result
