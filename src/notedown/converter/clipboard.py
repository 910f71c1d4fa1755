"""Turn clipboard text into a pasteable :class:`~notedown.schema.Slice`.

Two input formats are supported:

* ``"plain"``: the editor's own grammar, parsed by the scanner and the
  document builder exactly as on load.
* ``"commonmark"``: Markdown copied from another application.  It is
  parsed with mistune v3's AST renderer and flattened onto the editor's
  node set: emphasis, strong and strikethrough keep their text, list
  items and block quotes become paragraphs, code blocks become
  paragraphs with hard breaks, code spans become plain text, images
  become their alt text, thematic breaks disappear, and links become
  text with a link mark.

Headings parsed from CommonMark carry no hash text; the paste sanitizer
synthesizes it before insertion.
"""

from __future__ import annotations

from typing import Literal

import mistune

from notedown.config import NotedownConfig
from notedown.converter.doc_builder import clamp_level
from notedown.converter.md_to_doc import MarkdownToDocConverter
from notedown.schema import (
    HeadingAttrs,
    Mark,
    Node,
    NodeKind,
    Slice,
    block,
    hard_break,
    link,
    normalize_inline,
    text,
)

ClipboardFormat = Literal["plain", "commonmark"]

# Inline containers whose formatting is not modelled; their text is kept.
_TRANSPARENT_INLINE: frozenset[str] = frozenset({
    "emphasis",
    "strong",
    "strikethrough",
    "image",
})

# Block tokens that carry nothing worth pasting.
_SKIP_BLOCKS: frozenset[str] = frozenset({
    "blank_line",
    "thematic_break",
})


class ClipboardParser:
    """Parse clipboard text into a slice ready for the paste sanitizer."""

    def __init__(self, config: NotedownConfig | None = None) -> None:
        self._config = config or NotedownConfig()
        self._converter = MarkdownToDocConverter(self._config)
        self._parser = mistune.create_markdown(
            renderer="ast",
            plugins=["strikethrough", "url"],
        )

    def parse(self, value: str, fmt: ClipboardFormat = "plain") -> Slice:
        """Parse *value* as *fmt*.

        Returns
        -------
        Slice
            Block content open on both sides, so the first and last
            pasted lines merge into the surrounding text.  Empty input
            yields :attr:`Slice.EMPTY`.
        """
        if fmt == "plain":
            blocks = list(self._converter.convert(value).content)
        elif fmt == "commonmark":
            blocks = self._from_commonmark(value)
        else:
            raise ValueError(f"Unknown clipboard format {fmt!r}")
        if not blocks:
            return Slice.EMPTY
        return Slice(tuple(blocks), open_start=1, open_end=1)

    # ------------------------------------------------------------------
    # CommonMark
    # ------------------------------------------------------------------

    def _from_commonmark(self, value: str) -> list[Node]:
        raw_tokens = self._parser(value)
        if isinstance(raw_tokens, str):
            return []
        return _blocks_from_tokens(raw_tokens)


def _blocks_from_tokens(tokens: list[dict]) -> list[Node]:
    nodes: list[Node] = []
    for token in tokens:
        token_type = token.get("type", "")
        if token_type in _SKIP_BLOCKS:
            continue

        if token_type == "heading":
            level = clamp_level(token.get("attrs", {}).get("level", 1))
            content = _inline_from_tokens(token.get("children", []))
            nodes.append(block(NodeKind.HEADING, content, HeadingAttrs(level)))
        elif token_type in ("paragraph", "block_text"):
            content = _inline_from_tokens(token.get("children", []))
            if content:
                nodes.append(block(NodeKind.PARAGRAPH, content))
        elif token_type == "block_code":
            content = _lines_to_inline(token.get("raw", "").rstrip("\n"))
            if content:
                nodes.append(block(NodeKind.PARAGRAPH, content))
        elif token.get("children"):
            # list, list_item, block_quote and friends
            nodes.extend(_blocks_from_tokens(token["children"]))
        elif token.get("raw", "").strip():
            nodes.append(block(NodeKind.PARAGRAPH, _lines_to_inline(token["raw"].strip())))
    return nodes


def _inline_from_tokens(tokens: list[dict], marks: tuple[Mark, ...] = ()) -> tuple[Node, ...]:
    nodes: list[Node] = []
    for token in tokens:
        token_type = token.get("type", "")
        if token_type in ("softbreak", "linebreak"):
            nodes.append(hard_break())
        elif token_type == "link":
            attrs = token.get("attrs", {})
            mark = link(attrs.get("url", ""), attrs.get("title"))
            nodes.extend(_inline_from_tokens(token.get("children", []), (mark,)))
        elif token_type in _TRANSPARENT_INLINE:
            nodes.extend(_inline_from_tokens(token.get("children", []), marks))
        elif token.get("raw"):
            # text, codespan, inline_html
            nodes.append(text(token["raw"], marks))
        elif token.get("children"):
            nodes.extend(_inline_from_tokens(token["children"], marks))
    return normalize_inline(nodes)


def _lines_to_inline(value: str) -> tuple[Node, ...]:
    nodes: list[Node] = []
    for index, line in enumerate(value.split("\n")):
        if index:
            nodes.append(hard_break())
        if line:
            nodes.append(text(line))
    return tuple(nodes)
