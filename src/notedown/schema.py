"""Document tree model.

The tree is built from a closed set of node kinds (:class:`NodeKind`) and
mark kinds (:class:`MarkKind`).  Each node kind carries a fixed attribute
record which is validated when the node is constructed; nodes are frozen
and edits produce new trees (see :mod:`notedown.editor.steps`).

Structure::

    doc        -> (heading | paragraph)*
    heading    -> inline*         attrs: HeadingAttrs(level=1..6)
    paragraph  -> inline*
    inline     =  text | hard_break
    text       -> leaf, non-empty, may carry a LinkMark

Positions follow flat-tree addressing: a block of content size ``n``
occupies ``n + 2`` positions, each character of text occupies one, and a
hard break occupies one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import ClassVar, Union

from notedown.errors import NotedownSchemaError

# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------

class NodeKind(str, Enum):
    """Every node kind the document can contain."""

    DOC = "doc"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    HARD_BREAK = "hard_break"


class MarkKind(str, Enum):
    """Every mark kind a text node can carry."""

    LINK = "link"


BLOCK_KINDS: frozenset[NodeKind] = frozenset({NodeKind.HEADING, NodeKind.PARAGRAPH})
INLINE_KINDS: frozenset[NodeKind] = frozenset({NodeKind.TEXT, NodeKind.HARD_BREAK})

MAX_HEADING_LEVEL = 6


# ---------------------------------------------------------------------------
# Attribute records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeadingAttrs:
    """Attribute record of a heading node."""

    level: int = 1

    def __post_init__(self) -> None:
        if (
            isinstance(self.level, bool)
            or not isinstance(self.level, int)
            or not 1 <= self.level <= MAX_HEADING_LEVEL
        ):
            raise NotedownSchemaError(
                f"Heading level must be an int in 1..{MAX_HEADING_LEVEL}, got {self.level!r}",
                context={"kind": NodeKind.HEADING.value, "field": "level", "value": self.level},
            )


@dataclass(frozen=True)
class LinkMark:
    """A link decoration on a text run.

    Links are non-inclusive: text typed right after a linked run does not
    inherit the mark.
    """

    href: str
    title: str | None = None
    kind: MarkKind = field(default=MarkKind.LINK, init=False)

    inclusive: ClassVar[bool] = False

    def __post_init__(self) -> None:
        if not isinstance(self.href, str):
            raise NotedownSchemaError(
                "Link href must be a string",
                context={"kind": MarkKind.LINK.value, "field": "href", "value": self.href},
            )
        if self.title is not None and not isinstance(self.title, str):
            raise NotedownSchemaError(
                "Link title must be a string or None",
                context={"kind": MarkKind.LINK.value, "field": "title", "value": self.title},
            )


Mark = LinkMark

_ATTR_RECORDS: dict[NodeKind, type | None] = {
    NodeKind.DOC: None,
    NodeKind.HEADING: HeadingAttrs,
    NodeKind.PARAGRAPH: None,
    NodeKind.TEXT: None,
    NodeKind.HARD_BREAK: None,
}


# ---------------------------------------------------------------------------
# Node
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Node:
    """An immutable document node.

    Use the factory helpers (:func:`doc`, :func:`heading`,
    :func:`paragraph`, :func:`text`, :func:`hard_break`) rather than
    calling the constructor directly.
    """

    kind: NodeKind
    content: tuple[Node, ...] = ()
    attrs: HeadingAttrs | None = None
    text: str | None = None
    marks: tuple[Mark, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "content", tuple(self.content))
        object.__setattr__(self, "marks", tuple(self.marks))

        if not isinstance(self.kind, NodeKind):
            raise NotedownSchemaError(
                f"Unknown node kind {self.kind!r}",
                context={"kind": self.kind},
            )
        kind = self.kind.value

        record = _ATTR_RECORDS[self.kind]
        if record is None and self.attrs is not None:
            raise NotedownSchemaError(
                f"Node kind '{kind}' takes no attributes",
                context={"kind": kind, "field": "attrs", "value": self.attrs},
            )
        if record is not None and not isinstance(self.attrs, record):
            raise NotedownSchemaError(
                f"Node kind '{kind}' requires a {record.__name__} record",
                context={"kind": kind, "field": "attrs", "value": self.attrs},
            )

        if self.kind is NodeKind.TEXT:
            if not isinstance(self.text, str) or not self.text:
                raise NotedownSchemaError(
                    "Text nodes must hold a non-empty string",
                    context={"kind": kind, "field": "text", "value": self.text},
                )
        elif self.text is not None:
            raise NotedownSchemaError(
                f"Node kind '{kind}' cannot hold text",
                context={"kind": kind, "field": "text", "value": self.text},
            )

        if self.kind in INLINE_KINDS and self.content:
            raise NotedownSchemaError(
                f"Leaf node '{kind}' cannot have content",
                context={"kind": kind, "field": "content"},
            )
        for child in self.content:
            if not isinstance(child, Node):
                raise NotedownSchemaError(
                    f"Content of '{kind}' must be nodes, got {type(child).__name__}",
                    context={"kind": kind, "field": "content", "value": child},
                )

        if self.marks:
            if self.kind is not NodeKind.TEXT:
                raise NotedownSchemaError(
                    f"Only text nodes carry marks, not '{kind}'",
                    context={"kind": kind, "field": "marks", "value": self.marks},
                )
            seen: set[MarkKind] = set()
            for mark in self.marks:
                if not isinstance(mark, LinkMark):
                    raise NotedownSchemaError(
                        f"Unknown mark {mark!r}",
                        context={"kind": kind, "field": "marks", "value": mark},
                    )
                if mark.kind in seen:
                    raise NotedownSchemaError(
                        f"Text carries more than one '{mark.kind.value}' mark",
                        context={"kind": kind, "field": "marks", "value": self.marks},
                    )
                seen.add(mark.kind)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @property
    def is_text(self) -> bool:
        return self.kind is NodeKind.TEXT

    @property
    def is_block(self) -> bool:
        return self.kind in BLOCK_KINDS

    @property
    def is_inline(self) -> bool:
        return self.kind in INLINE_KINDS

    @property
    def is_leaf(self) -> bool:
        return self.kind in INLINE_KINDS

    @property
    def level(self) -> int | None:
        """Heading level, or ``None`` for every other kind."""
        return self.attrs.level if isinstance(self.attrs, HeadingAttrs) else None

    # ------------------------------------------------------------------
    # Size and text
    # ------------------------------------------------------------------

    @cached_property
    def content_size(self) -> int:
        return sum(child.node_size for child in self.content)

    @property
    def node_size(self) -> int:
        if self.kind is NodeKind.TEXT:
            return len(self.text)  # type: ignore[arg-type]
        if self.is_leaf:
            return 1
        return self.content_size + 2

    @cached_property
    def text_content(self) -> str:
        """Concatenated text of all descendants.  Hard breaks add nothing."""
        if self.kind is NodeKind.TEXT:
            return self.text  # type: ignore[return-value]
        return "".join(child.text_content for child in self.content)

    @property
    def child_count(self) -> int:
        return len(self.content)

    def child(self, index: int) -> Node:
        return self.content[index]

    # ------------------------------------------------------------------
    # Marks
    # ------------------------------------------------------------------

    def mark(self, kind: MarkKind) -> Mark | None:
        """Return the mark of *kind* on this node, if any."""
        for mark in self.marks:
            if mark.kind is kind:
                return mark
        return None

    def has_marks(self) -> bool:
        """True when this node or any descendant carries a mark."""
        if self.marks:
            return True
        return any(child.has_marks() for child in self.content)

    def same_markup(self, other: Node) -> bool:
        return (
            self.kind is other.kind
            and self.attrs == other.attrs
            and self.marks == other.marks
        )

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def copy(self, content: Iterable[Node]) -> Node:
        """Return a node with the same markup and new *content*."""
        return Node(self.kind, tuple(content), self.attrs, self.text, self.marks)

    def with_text(self, value: str) -> Node:
        return Node(NodeKind.TEXT, text=value, marks=self.marks)

    def with_marks(self, marks: Iterable[Mark]) -> Node:
        return Node(self.kind, self.content, self.attrs, self.text, tuple(marks))

    def replace_child(self, index: int, *nodes: Node) -> Node:
        """Return a copy with the child at *index* replaced by *nodes*."""
        return self.copy(self.content[:index] + nodes + self.content[index + 1:])

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def descendants(self) -> Iterator[tuple[Node, int, Node]]:
        """Yield ``(node, pos, parent)`` for every descendant in document order.

        ``pos`` is the position directly before the node, relative to the
        start of this node's content.
        """
        pos = 0
        for child in self.content:
            yield child, pos, self
            for node, inner, parent in child.descendants():
                yield node, pos + 1 + inner, parent
            pos += child.node_size

    def blocks(self) -> Iterator[tuple[int, int, Node]]:
        """Yield ``(index, pos, block)`` for each direct child."""
        pos = 0
        for index, child in enumerate(self.content):
            yield index, pos, child
            pos += child.node_size

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def check(self) -> None:
        """Validate the content expression of this subtree.

        Raises
        ------
        NotedownSchemaError
            If a doc holds a non-block child or a block holds a non-inline
            child.
        """
        if self.kind is NodeKind.DOC:
            allowed = BLOCK_KINDS
        elif self.kind in BLOCK_KINDS:
            allowed = INLINE_KINDS
        else:
            return
        for index, child in enumerate(self.content):
            if child.kind not in allowed:
                raise NotedownSchemaError(
                    f"'{child.kind.value}' is not allowed inside '{self.kind.value}'",
                    context={"kind": self.kind.value, "field": "content", "index": index},
                )
            child.check()


# ---------------------------------------------------------------------------
# Slice
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Slice:
    """A detached fragment together with its open depths.

    ``open_start``/``open_end`` of ``1`` mean the first/last block is
    "open": its inline content is meant to merge into the block it is
    inserted into rather than standing as a block of its own.  Inline
    fragments always have open depths of ``0``.
    """

    content: tuple[Node, ...] = ()
    open_start: int = 0
    open_end: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "content", tuple(self.content))

    @property
    def size(self) -> int:
        return fragment_size(self.content)

    @property
    def is_inline(self) -> bool:
        return all(node.is_inline for node in self.content)

    EMPTY: ClassVar[Slice]


Slice.EMPTY = Slice()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

InlineArg = Union[Node, str]


def _inline(items: Iterable[InlineArg]) -> tuple[Node, ...]:
    nodes: list[Node] = []
    for item in items:
        if isinstance(item, str):
            if item:
                nodes.append(text(item))
        else:
            nodes.append(item)
    return tuple(nodes)


def doc(*blocks: Node) -> Node:
    return Node(NodeKind.DOC, blocks)


def heading(level: int, *content: InlineArg) -> Node:
    return Node(NodeKind.HEADING, _inline(content), HeadingAttrs(level))


def paragraph(*content: InlineArg) -> Node:
    return Node(NodeKind.PARAGRAPH, _inline(content))


def text(value: str, marks: Iterable[Mark] = ()) -> Node:
    return Node(NodeKind.TEXT, text=value, marks=tuple(marks))


def hard_break() -> Node:
    return Node(NodeKind.HARD_BREAK)


def link(href: str, title: str | None = None) -> LinkMark:
    return LinkMark(href=href, title=title)


def block(kind: NodeKind, content: Iterable[Node] = (), attrs: HeadingAttrs | None = None) -> Node:
    """Build a block of *kind*; headings default to level 1."""
    if kind is NodeKind.HEADING and attrs is None:
        attrs = HeadingAttrs()
    return Node(kind, tuple(content), attrs)


# ---------------------------------------------------------------------------
# Inline fragment helpers
# ---------------------------------------------------------------------------

def fragment_size(nodes: Iterable[Node]) -> int:
    return sum(node.node_size for node in nodes)


def add_mark(marks: tuple[Mark, ...], mark: Mark) -> tuple[Mark, ...]:
    """Add *mark* to a mark set, replacing any mark of the same kind."""
    return tuple(m for m in marks if m.kind is not mark.kind) + (mark,)


def remove_mark(marks: tuple[Mark, ...], mark: Mark) -> tuple[Mark, ...]:
    return tuple(m for m in marks if m != mark)


def normalize_inline(nodes: Iterable[Node]) -> tuple[Node, ...]:
    """Merge adjacent text nodes that carry identical marks."""
    result: list[Node] = []
    for node in nodes:
        if (
            node.is_text
            and result
            and result[-1].is_text
            and result[-1].marks == node.marks
        ):
            result[-1] = result[-1].with_text(result[-1].text + node.text)  # type: ignore[operator]
        else:
            result.append(node)
    return tuple(result)


def cut_inline(nodes: Iterable[Node], start: int = 0, end: int | None = None) -> tuple[Node, ...]:
    """Return the inline nodes between offsets *start* and *end*.

    Text nodes straddling a boundary are cut; leaves are kept whole when
    they fall inside the range.
    """
    result: list[Node] = []
    pos = 0
    for node in nodes:
        size = node.node_size
        node_end = pos + size
        if end is not None and pos >= end:
            break
        if node_end > start:
            if node.is_text:
                lo = max(start - pos, 0)
                hi = size if end is None else min(end - pos, size)
                if hi > lo:
                    result.append(node.with_text(node.text[lo:hi]))  # type: ignore[index]
            else:
                result.append(node)
        pos = node_end
    return tuple(result)


def inline_lines(content: Iterable[Node]) -> list[tuple[int, int, str]]:
    """Split inline content into lines at hard breaks.

    Returns ``(start, end, text)`` tuples with offsets relative to the
    start of the content.  A block with ``n`` hard breaks has ``n + 1``
    lines; lines may be empty.
    """
    lines: list[tuple[int, int, str]] = []
    start = 0
    pos = 0
    parts: list[str] = []
    for node in content:
        if node.kind is NodeKind.HARD_BREAK:
            lines.append((start, pos, "".join(parts)))
            pos += 1
            start = pos
            parts = []
        else:
            parts.append(node.text_content)
            pos += node.node_size
    lines.append((start, pos, "".join(parts)))
    return lines
