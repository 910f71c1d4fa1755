"""Editor commands bound to keys and clicks.

Commands follow the usual ``command(state, dispatch) -> bool`` shape: they
return ``True`` when they apply to the state and, when *dispatch* is
given, hand it the transaction to commit.  Calling a command without
*dispatch* only checks whether it would apply.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from notedown.editor.positions import ResolvedPos, resolve, resolve_inline
from notedown.editor.transaction import EditorState, Transaction
from notedown.errors import NotedownUnresolvablePositionError
from notedown.observability import get_logger, log_event
from notedown.schema import MarkKind, Node, NodeKind, hard_break, paragraph

log = get_logger("notedown.commands")

Dispatch = Callable[[Transaction], object]


def _resolve_caret(doc: Node, pos: int, command: str) -> ResolvedPos | None:
    try:
        return resolve_inline(doc, pos)
    except NotedownUnresolvablePositionError as exc:
        log_event(
            log,
            logging.WARNING,
            "Command ignored: caret not inside a text block",
            op=command,
            pos=pos,
            reason=exc.context.get("reason"),
            doc_size=doc.content_size,
        )
        return None


# ---------------------------------------------------------------------------
# Enter
# ---------------------------------------------------------------------------

def insert_newline(state: EditorState, dispatch: Dispatch | None = None) -> bool:
    """Handle the Enter key.

    * In a paragraph, insert a hard break.  If the caret directly follows
      a hard break, that break becomes a paragraph boundary instead, so
      pressing Enter twice starts a new paragraph.
    * In a heading, add an empty paragraph after it and move the caret
      there.

    A selection is deleted first.  Selections spanning blocks are left to
    the host (returns ``False``), as is a caret that cannot be resolved
    inside a block.
    """
    selection = state.selection
    start = _resolve_caret(state.doc, selection.from_, "insert_newline")
    end = _resolve_caret(state.doc, selection.to, "insert_newline")
    if start is None or end is None:
        return False
    if not start.same_parent(end):
        return False

    tr = state.tr
    tr.delete_selection()
    pos = tr.selection.head
    rpos = resolve_inline(tr.doc, pos)

    if rpos.parent.kind is NodeKind.PARAGRAPH:
        before = rpos.node_before
        if before is not None and before.kind is NodeKind.HARD_BREAK:
            tr.split(pos - 1, consume_break=True)
            tr.set_selection(pos + 1)
        else:
            tr.insert(pos, (hard_break(),))
            tr.set_selection(pos + 1)
    else:
        tr.replace_blocks(rpos.block_end, rpos.block_end, (paragraph(),))
        tr.set_selection(rpos.block_end + 1)

    if dispatch is not None:
        dispatch(tr)
    return True


# ---------------------------------------------------------------------------
# Backspace
# ---------------------------------------------------------------------------

def delete_backward(state: EditorState, dispatch: Dispatch | None = None) -> bool:
    """Handle the Backspace key.

    Deletes the selection, or the character (or hard break) before the
    caret.  At the start of a block the block is joined onto the previous
    one.  Returns ``False`` at the very start of the document.
    """
    selection = state.selection
    if not selection.empty:
        if dispatch is not None:
            dispatch(state.tr.delete_selection())
        return True

    rpos = _resolve_caret(state.doc, selection.head, "delete_backward")
    if rpos is None:
        return False

    tr = state.tr
    if rpos.parent_offset > 0:
        tr.delete(rpos.pos - 1, rpos.pos)
    elif rpos.index > 0:
        tr.join(rpos.block_start)
    else:
        return False

    if dispatch is not None:
        dispatch(tr)
    return True


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

def link_href_at(doc: Node, pos: int) -> str | None:
    """Return the ``href`` of the link on the character after *pos*.

    Used by click handling to open links.  Returns ``None`` when there is
    no linked text at *pos* or *pos* is not inside a block.
    """
    try:
        rpos = resolve(doc, pos)
    except NotedownUnresolvablePositionError:
        return None
    node = rpos.node_after
    if rpos.depth != 1 or node is None:
        return None
    mark = node.mark(MarkKind.LINK)
    return mark.href if mark is not None else None
