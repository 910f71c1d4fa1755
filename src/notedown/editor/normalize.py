"""Normalization engine: re-derive block types and links from text.

After every edit the committed document must agree with what its text
says:

* a block whose line reads ``"## Title"`` is a level-2 heading and a
  heading whose hashes were deleted is a paragraph again;
* every URL in paragraph text is a link, and nothing else is;
* no two hard breaks sit next to each other.

:class:`Normalizer` inspects the post-edit document and returns either
:class:`NoChange` or a :class:`Correction` holding the corrective steps.
:class:`~notedown.editor.session.EditorSession` appends those steps to the
user's transaction so the edit and its correction commit atomically.

The passes compute positions against the document as it was when the
pass started and map them through the steps the pass has already
emitted, so a split early in the document never invalidates the
positions of later blocks.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Union

from notedown.config import NotedownConfig
from notedown.converter.scanner import DEFAULT_URL_RE, heading_level, url_pattern
from notedown.editor.positions import resolve_inline
from notedown.editor.steps import ReplaceInlineStep
from notedown.editor.transaction import Selection, Transaction
from notedown.errors import NotedownUnresolvablePositionError
from notedown.observability import get_logger, log_event, resolve_metrics
from notedown.schema import (
    HeadingAttrs,
    Mark,
    MarkKind,
    Node,
    NodeKind,
    inline_lines,
    link,
)

log = get_logger("notedown.normalize")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NoChange:
    """The document is already normalized, or correction was skipped."""

    reason: str | None = None


@dataclass(frozen=True)
class Correction:
    """Corrective steps rooted at the post-edit document."""

    transaction: Transaction


NormalizationResult = Union[NoChange, Correction]


# ---------------------------------------------------------------------------
# Hard break runs
# ---------------------------------------------------------------------------

def collapse_break_runs(tr: Transaction) -> Transaction:
    """Leave no two hard breaks next to each other.

    A run of breaks between two pieces of text is a paragraph boundary,
    as when Enter is pressed twice: the block is split at the first break
    and the rest of the run is deleted.  A run at either edge of a block
    is cut down to a single break.
    """
    first_step = len(tr.steps)
    for _, block_pos, block in tr.doc.blocks():
        content_start = block_pos + 1
        for run_start, run_end in _break_runs(block):
            mapping = tr.mapping.slice(first_step)
            if 0 < run_start and run_end < block.content_size:
                tr.split(mapping.map(content_start + run_start), consume_break=True)
                mapping = tr.mapping.slice(first_step)
                if run_end - run_start > 1:
                    tr.step(ReplaceInlineStep(
                        mapping.map(content_start + run_start + 1),
                        mapping.map(content_start + run_end),
                    ))
            else:
                tr.step(ReplaceInlineStep(
                    mapping.map(content_start + run_start + 1),
                    mapping.map(content_start + run_end),
                ))
    return tr


def _break_runs(block: Node) -> list[tuple[int, int]]:
    """Offsets of every run of two or more consecutive hard breaks."""
    runs: list[tuple[int, int]] = []
    offset = 0
    run_start: int | None = None
    for node in block.content:
        if node.kind is NodeKind.HARD_BREAK:
            if run_start is None:
                run_start = offset
        else:
            if run_start is not None and offset - run_start > 1:
                runs.append((run_start, offset))
            run_start = None
        offset += node.node_size
    if run_start is not None and offset - run_start > 1:
        runs.append((run_start, offset))
    return runs


# ---------------------------------------------------------------------------
# Heading reclassification
# ---------------------------------------------------------------------------

def reclassify_headings(tr: Transaction) -> Transaction:
    """Make every block's type agree with its text.

    Each heading-shaped line (``^#{1,6} ``) ends up alone in a heading
    block of the matching level; every other run of lines is a paragraph.
    Blocks are split at the hard break around a heading-shaped line, the
    break being consumed by the split.  Marks are stripped from headings.

    A heading whose first line is not heading-shaped but whose text
    carries marks only has its marks stripped; it is demoted on the next
    pass.

    The pass never edits text, so it cannot create a heading-shaped line
    and running it twice yields no steps the second time.
    """
    start_doc = tr.doc
    first_step = len(tr.steps)
    for _, block_pos, block in start_doc.blocks():
        _reclassify_block(tr, first_step, block_pos, block)
    return tr


def _reclassify_block(tr: Transaction, first_step: int, block_pos: int, block: Node) -> None:
    lines = inline_lines(block.content)
    levels = [heading_level(line_text) for _, _, line_text in lines]
    content_start = block_pos + 1

    if block.kind is NodeKind.HEADING and levels[0] is None and block.has_marks():
        mapping = tr.mapping.slice(first_step)
        tr.remove_mark(
            mapping.map(content_start),
            mapping.map(content_start + block.content_size),
            MarkKind.LINK,
        )
        return

    # Break offsets to split at, each one between two lines.
    splits: set[int] = set()
    for index, level in enumerate(levels):
        if level is None:
            continue
        if index > 0:
            splits.add(lines[index - 1][1])
        if index < len(lines) - 1:
            splits.add(lines[index][1])

    segments: list[tuple[int, int, NodeKind, HeadingAttrs | None]] = []
    seg_first = 0
    for index, (_, line_end, _) in enumerate(lines):
        if index == len(lines) - 1 or line_end in splits:
            kind, attrs = _segment_type(levels[seg_first:index + 1])
            segments.append((lines[seg_first][0], line_end, kind, attrs))
            seg_first = index + 1

    for seg_start, _, kind, attrs in segments[1:]:
        mapping = tr.mapping.slice(first_step)
        tr.split(mapping.map(content_start + seg_start - 1), kind, attrs, consume_break=True)

    _, _, kind, attrs = segments[0]
    if kind is not block.kind or attrs != block.attrs:
        mapping = tr.mapping.slice(first_step)
        tr.set_block_type(mapping.map(block_pos), kind, attrs)

    if not block.has_marks():
        return
    for seg_start, seg_end, kind, _ in segments:
        if kind is not NodeKind.HEADING:
            continue
        mapping = tr.mapping.slice(first_step)
        tr.remove_mark(
            mapping.map(content_start + seg_start),
            mapping.map(content_start + seg_end),
            MarkKind.LINK,
        )


def _segment_type(levels: list[int | None]) -> tuple[NodeKind, HeadingAttrs | None]:
    if len(levels) == 1 and levels[0] is not None:
        return NodeKind.HEADING, HeadingAttrs(levels[0])
    return NodeKind.PARAGRAPH, None


# ---------------------------------------------------------------------------
# Autolink
# ---------------------------------------------------------------------------

def autolink(tr: Transaction, pattern: re.Pattern[str] = DEFAULT_URL_RE) -> Transaction:
    """Make link marks in paragraphs match the URLs in their text.

    Each URL match gets a link whose ``href`` is the matched text, and no
    other paragraph text keeps a link.  Paragraphs whose links already
    agree are left alone.  Headings are never linked.
    """
    for _, block_pos, block in tr.doc.blocks():
        if block.kind is not NodeKind.PARAGRAPH:
            continue
        desired = _desired_links(block, pattern)
        if desired == _existing_links(block):
            continue
        content_start = block_pos + 1
        tr.remove_mark(content_start, content_start + block.content_size, MarkKind.LINK)
        for start, end, mark in desired:
            tr.add_mark(content_start + start, content_start + end, mark)
    return tr


def _desired_links(block: Node, pattern: re.Pattern[str]) -> list[tuple[int, int, Mark]]:
    spans: list[tuple[int, int, Mark]] = []
    for line_start, _, line_text in inline_lines(block.content):
        for match in pattern.finditer(line_text):
            spans.append((line_start + match.start(), line_start + match.end(), link(match.group(0))))
    return _merge_spans(spans)


def _existing_links(block: Node) -> list[tuple[int, int, Mark]]:
    spans: list[tuple[int, int, Mark]] = []
    offset = 0
    for node in block.content:
        mark = node.mark(MarkKind.LINK)
        if mark is not None:
            spans.append((offset, offset + node.node_size, mark))
        offset += node.node_size
    return _merge_spans(spans)


def _merge_spans(spans: list[tuple[int, int, Mark]]) -> list[tuple[int, int, Mark]]:
    """Merge touching spans with equal marks, as the tree itself does."""
    merged: list[tuple[int, int, Mark]] = []
    for start, end, mark in spans:
        if merged and merged[-1][1] == start and merged[-1][2] == mark:
            merged[-1] = (merged[-1][0], end, mark)
        else:
            merged.append((start, end, mark))
    return merged


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

class Normalizer:
    """Run the normalization passes over a post-edit document.

    Parameters
    ----------
    config:
        Supplies the URL schemes for the autolink pass and the metrics
        backend.
    """

    def __init__(self, config: NotedownConfig | None = None) -> None:
        self._config = config or NotedownConfig()
        self._pattern = url_pattern(self._config.url_schemes)
        self._metrics = resolve_metrics(self._config.metrics)

    def normalize(self, doc: Node, selection: Selection) -> NormalizationResult:
        """Return the correction *doc* needs, if any.

        Runs of hard breaks are collapsed first, since they decide where
        lines and blocks end.  Heading reclassification runs before
        autolinking, since links are only derived inside paragraphs.

        When the caret cannot be resolved inside a text block the passes
        are skipped: the result is :class:`NoChange`, a warning is logged
        and ``notedown.normalize_skipped_total`` is incremented.
        """
        tr = Transaction(doc, selection)
        try:
            resolve_inline(doc, selection.head)
            collapse_break_runs(tr)
            reclassify_headings(tr)
            autolink(tr, self._pattern)
        except NotedownUnresolvablePositionError as exc:
            reason = exc.context.get("reason", "unresolvable_position")
            log_event(
                log,
                logging.WARNING,
                "Normalization skipped",
                op="normalize",
                reason=reason,
                pos=exc.context.get("pos"),
                doc_size=doc.content_size,
            )
            self._metrics.increment(
                "notedown.normalize_skipped_total",
                tags={"reason": str(reason)},
            )
            return NoChange(reason=str(reason))

        if not tr.doc_changed:
            return NoChange()

        self._metrics.increment("notedown.normalize_corrections_total")
        log_event(
            log,
            logging.DEBUG,
            "Normalization corrected document",
            op="normalize",
            steps=len(tr.steps),
            doc_size=doc.content_size,
        )
        return Correction(tr)
