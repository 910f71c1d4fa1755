"""Full Markdown-to-document conversion pipeline.

:class:`MarkdownToDocConverter` runs the two load-time stages:

1. **Scan**: :class:`MarkdownScanner` splits the text into blocks of
   heading, URL, line-break and text tokens.
2. **Build**: :func:`build_doc` groups the tokens into headings and
   paragraphs, marking URLs as links.
"""

from __future__ import annotations

import json
import sys

from notedown.config import NotedownConfig
from notedown.converter.doc_builder import build_doc
from notedown.converter.scanner import MarkdownScanner
from notedown.models import token_to_dict
from notedown.schema import Node


class MarkdownToDocConverter:
    """Convert Markdown text to a document tree.

    Parameters
    ----------
    config:
        Configuration controlling URL schemes and debug output.

    Examples
    --------
    >>> converter = MarkdownToDocConverter(NotedownConfig())
    >>> tree = converter.convert("# Hello\\n\\nWorld")
    >>> [block.kind.value for block in tree.content]
    ['heading', 'paragraph']
    """

    def __init__(self, config: NotedownConfig | None = None) -> None:
        self._config = config or NotedownConfig()
        self._scanner = MarkdownScanner(self._config)

    def convert(self, markdown: str) -> Node:
        """Full pipeline: scan -> build."""
        blocks = self._scanner.scan(markdown)

        if self._config.debug_dump_tokens:
            print(
                "[notedown] Scanned tokens:",
                json.dumps(
                    [[token_to_dict(token) for token in block] for block in blocks],
                    indent=2,
                    ensure_ascii=False,
                ),
                file=sys.stderr,
            )

        return build_doc(blocks)
