"""Markdown <-> document conversion pipeline.

Public API:

- :class:`MarkdownScanner`: Markdown text -> blocks of tokens.
- :func:`build_doc`: tokens -> document tree.
- :class:`MarkdownToDocConverter`: scan and build in one call.
- :class:`MarkdownSerializer`: document tree -> Markdown text.
- :class:`ClipboardParser`: clipboard text -> pasteable slice.
"""

from notedown.converter.clipboard import ClipboardParser
from notedown.converter.doc_builder import build_blocks, build_doc
from notedown.converter.md_serializer import MarkdownSerializer, serialize_markdown
from notedown.converter.md_to_doc import MarkdownToDocConverter
from notedown.converter.scanner import MarkdownScanner, scan_markdown, url_pattern

__all__ = [
    "ClipboardParser",
    "MarkdownScanner",
    "MarkdownSerializer",
    "MarkdownToDocConverter",
    "build_blocks",
    "build_doc",
    "scan_markdown",
    "serialize_markdown",
    "url_pattern",
]
