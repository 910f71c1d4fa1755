"""notedown: Markdown-synchronized note editing core.

Public re-exports
-----------------

* **Session:** :class:`EditorSession`
* **Configuration:** :class:`NotedownConfig`
* **Conversion:** :class:`MarkdownToDocConverter`, :class:`MarkdownSerializer`,
  :class:`ClipboardParser`
* **Errors:** Every :class:`NotedownError` subclass and :class:`ErrorCode`
* **Document model:** node and mark kinds, :class:`Node`, :class:`Slice`

Usage::

    from notedown import EditorSession

    session = EditorSession.from_markdown("# Notes\\n\\nSee https://example.com")
    session.to_markdown()
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from notedown.config import DEFAULT_URL_SCHEMES, NotedownConfig

# ── Conversion ──────────────────────────────────────────────────────────
from notedown.converter import (
    ClipboardParser,
    MarkdownSerializer,
    MarkdownToDocConverter,
    serialize_markdown,
)

# ── Session ─────────────────────────────────────────────────────────────
from notedown.editor import EditorSession, EditorState, Selection, Transaction

# ── Errors ──────────────────────────────────────────────────────────────
from notedown.errors import (
    ErrorCode,
    NotedownError,
    NotedownSchemaError,
    NotedownUnknownNodeKindError,
    NotedownUnresolvablePositionError,
)

# ── Document model ──────────────────────────────────────────────────────
from notedown.schema import (
    HeadingAttrs,
    LinkMark,
    MarkKind,
    Node,
    NodeKind,
    Slice,
)

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Session
    "EditorSession",
    "EditorState",
    "Selection",
    "Transaction",
    # Configuration
    "NotedownConfig",
    "DEFAULT_URL_SCHEMES",
    # Conversion
    "MarkdownToDocConverter",
    "MarkdownSerializer",
    "ClipboardParser",
    "serialize_markdown",
    # Errors
    "NotedownError",
    "ErrorCode",
    "NotedownUnknownNodeKindError",
    "NotedownUnresolvablePositionError",
    "NotedownSchemaError",
    # Document model
    "NodeKind",
    "MarkKind",
    "Node",
    "HeadingAttrs",
    "LinkMark",
    "Slice",
]
