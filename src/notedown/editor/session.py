"""Editor session: the single owner and mutator of the live document.

An :class:`EditorSession` holds the current :class:`EditorState`.  Edit
intents from the host (typing, deleting, Enter, paste) become
transactions, and every transaction goes through :meth:`dispatch`:

1. the :class:`~notedown.editor.normalize.Normalizer` inspects the
   post-edit document;
2. any correction's steps are appended to the same transaction;
3. the new state is stored;
4. subscribers (the rendering layer) are notified.

Usage::

    session = EditorSession.from_markdown("Hello")
    session.set_selection(6)
    session.press_enter()
    session.insert_text("## Title")
    session.to_markdown()   # 'Hello\\n\\n## Title\\n\\n'
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Callable

from notedown.config import NotedownConfig
from notedown.converter.clipboard import ClipboardFormat, ClipboardParser
from notedown.converter.md_serializer import MarkdownSerializer
from notedown.converter.md_to_doc import MarkdownToDocConverter
from notedown.editor.commands import delete_backward, insert_newline, link_href_at
from notedown.editor.normalize import Correction, Normalizer
from notedown.editor.paste import sanitize_paste
from notedown.editor.positions import resolve_inline
from notedown.editor.steps import describe_step
from notedown.editor.transaction import EditorState, Selection, Transaction
from notedown.observability import get_logger, log_event, resolve_metrics
from notedown.schema import Node, Slice, doc as make_doc, paragraph

log = get_logger("notedown.session")

Subscriber = Callable[[EditorState, Transaction], None]


class EditorSession:
    """Own the editor state and commit transactions through normalization.

    Parameters
    ----------
    doc:
        Initial document.  Defaults to an empty document.
    config:
        Editor configuration.  Defaults to :class:`NotedownConfig`.
    selection:
        Initial selection.  Defaults to a caret at the start of the first
        block.
    """

    def __init__(
        self,
        doc: Node | None = None,
        config: NotedownConfig | None = None,
        selection: Selection | None = None,
    ) -> None:
        self._config = config or NotedownConfig()
        self._metrics = resolve_metrics(self._config.metrics)
        self._normalizer = Normalizer(self._config)
        self._serializer = MarkdownSerializer()
        self._clipboard = ClipboardParser(self._config)
        self._subscribers: list[Subscriber] = []

        if doc is None:
            doc = make_doc()
        if not doc.content and self._config.seed_empty_paragraph:
            doc = doc.copy((paragraph(),))
        doc.check()
        if selection is None:
            selection = Selection.caret(1 if doc.content else 0)
        self._state = EditorState(doc, selection)

        if self._config.normalize_on_load:
            result = self._normalizer.normalize(doc, selection)
            if isinstance(result, Correction):
                self._state = self._state.apply(result.transaction)

    @classmethod
    def from_markdown(cls, markdown: str, config: NotedownConfig | None = None) -> EditorSession:
        """Load *markdown* into a new session."""
        config = config or NotedownConfig()
        return cls(MarkdownToDocConverter(config).convert(markdown), config)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def doc(self) -> Node:
        return self._state.doc

    @property
    def selection(self) -> Selection:
        return self._state.selection

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call *callback* with ``(state, transaction)`` after each commit.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Commit path
    # ------------------------------------------------------------------

    def dispatch(self, tr: Transaction) -> Transaction:
        """Normalize, commit and broadcast *tr*.

        Returns
        -------
        Transaction
            *tr* itself, extended with any corrective steps.

        Raises
        ------
        ValueError
            If *tr* was not started from the current document.
        """
        if tr.before is not self._state.doc and tr.before != self._state.doc:
            raise ValueError("Transaction was not started from the current document")

        t0 = time.monotonic()
        result = self._normalizer.normalize(tr.doc, tr.selection)
        corrected = isinstance(result, Correction)
        if corrected:
            tr.extend(result.transaction)
        self._state = self._state.apply(tr)
        elapsed_ms = (time.monotonic() - t0) * 1000

        self._metrics.increment(
            "notedown.transactions_total",
            tags={"corrected": str(corrected).lower()},
        )
        self._metrics.timing("notedown.commit_duration_ms", elapsed_ms)
        self._metrics.gauge("notedown.doc_size", float(tr.doc.content_size))
        log_event(
            log,
            logging.DEBUG,
            "Transaction committed",
            op="dispatch",
            steps=len(tr.steps),
            corrected=corrected,
            doc_size=tr.doc.content_size,
        )
        if self._config.debug_dump_steps:
            print(
                "[notedown] Committed steps:",
                json.dumps([describe_step(step) for step in tr.steps], indent=2, default=str),
                file=sys.stderr,
            )

        for callback in list(self._subscribers):
            callback(self._state, tr)
        return tr

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def insert_text(self, value: str) -> Transaction:
        """Type *value* over the selection."""
        return self.dispatch(self._state.tr.insert_text(value))

    def delete(self, from_: int, to: int) -> Transaction:
        """Delete ``from_..to``, joining the blocks it spans."""
        return self.dispatch(self._state.tr.delete(from_, to))

    def delete_backward(self) -> bool:
        """Backspace.  Returns ``False`` when there is nothing to delete."""
        return delete_backward(self._state, self.dispatch)

    def press_enter(self) -> bool:
        """Enter.  See :func:`~notedown.editor.commands.insert_newline`."""
        return insert_newline(self._state, self.dispatch)

    def paste(self, slice_: Slice) -> Transaction:
        """Sanitize *slice_* and insert it in place of the selection."""
        sanitized = sanitize_paste(slice_, self._config)
        self._metrics.increment("notedown.paste_sanitized_total")
        tr = self._state.tr.replace_selection_with_slice(sanitized)
        tr.set_meta("paste", True)
        return self.dispatch(tr)

    def paste_text(self, value: str, fmt: ClipboardFormat = "plain") -> Transaction:
        """Parse clipboard text as *fmt* and paste it."""
        return self.paste(self._clipboard.parse(value, fmt))

    def set_selection(self, anchor: int, head: int | None = None) -> Transaction:
        """Move the selection.

        Raises
        ------
        NotedownUnresolvablePositionError
            If either end is not inside a block.
        """
        head = anchor if head is None else head
        resolve_inline(self._state.doc, anchor)
        resolve_inline(self._state.doc, head)
        return self.dispatch(self._state.tr.set_selection(Selection(anchor, head)))

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_markdown(self) -> str:
        """Serialize the current document."""
        return self._serializer.serialize(self._state.doc)

    def link_at(self, pos: int) -> str | None:
        """Return the link ``href`` at *pos*, if any."""
        return link_href_at(self._state.doc, pos)
