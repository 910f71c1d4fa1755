"""Live editing: positions, steps, transactions, normalization and the session.

Public API:

- :class:`EditorSession`: owns the document and commits transactions.
- :class:`Transaction` / :class:`EditorState` / :class:`Selection`.
- :class:`Normalizer`: heading and link correction after each edit.
- :func:`insert_newline` / :func:`delete_backward`: key commands.
- :func:`sanitize_paste`: clean up clipboard fragments.
"""

from notedown.editor.commands import delete_backward, insert_newline, link_href_at
from notedown.editor.normalize import (
    Correction,
    NoChange,
    Normalizer,
    autolink,
    collapse_break_runs,
    reclassify_headings,
)
from notedown.editor.paste import sanitize_paste
from notedown.editor.positions import ResolvedPos, resolve
from notedown.editor.session import EditorSession
from notedown.editor.steps import Mapping, Step, StepMap
from notedown.editor.transaction import EditorState, Selection, Transaction

__all__ = [
    "Correction",
    "EditorSession",
    "EditorState",
    "Mapping",
    "NoChange",
    "Normalizer",
    "ResolvedPos",
    "Selection",
    "Step",
    "StepMap",
    "Transaction",
    "autolink",
    "collapse_break_runs",
    "delete_backward",
    "insert_newline",
    "link_href_at",
    "reclassify_headings",
    "resolve",
    "sanitize_paste",
]
