"""Unit tests for the document builder and the load-time converter."""

import json

from notedown.config import NotedownConfig
from notedown.converter.doc_builder import build_blocks, build_doc, clamp_level
from notedown.converter.md_to_doc import MarkdownToDocConverter
from notedown.converter.scanner import scan_markdown
from notedown.models import HeadingToken, LineBreakToken, TextToken, UrlToken
from notedown.schema import NodeKind, doc, hard_break, heading, link, paragraph, text


class TestBuildDoc:
    def test_empty(self):
        assert build_doc([]) == doc()

    def test_heading_then_paragraph(self):
        result = build_doc(scan_markdown("# Heading 1\n\nSome text."))
        assert result == doc(heading(1, "# Heading 1"), paragraph("Some text."))

    def test_heading_keeps_hash_prefix(self):
        result = build_doc([[HeadingToken(level=3, content="### Three")]])
        block = result.child(0)
        assert block.kind is NodeKind.HEADING
        assert block.level == 3
        assert block.text_content == "### Three"

    def test_line_break_becomes_hard_break(self):
        result = build_doc([[TextToken("a"), LineBreakToken(), TextToken("b")]])
        assert result == doc(paragraph("a", hard_break(), "b"))

    def test_url_becomes_linked_text(self):
        result = build_doc([[TextToken("see "), UrlToken("https://x.org")]])
        assert result == doc(paragraph("see ", text("https://x.org", [link("https://x.org")])))

    def test_heading_flushes_paragraph_and_drops_edge_breaks(self):
        result = build_doc(scan_markdown("https://google.com\n# Heading\nafter"))
        assert result == doc(
            paragraph(text("https://google.com", [link("https://google.com")])),
            heading(1, "# Heading"),
            paragraph("after"),
        )

    def test_level_is_clamped(self):
        result = build_doc([[HeadingToken(level=9, content="######### deep")]])
        assert result.child(0).level == 6

    def test_clamp_level(self):
        assert clamp_level(0) == 1
        assert clamp_level(4) == 4
        assert clamp_level(12) == 6

    def test_build_blocks_returns_flat_list(self):
        blocks = build_blocks(scan_markdown("a\n\nb\n\nc"))
        assert [block.text_content for block in blocks] == ["a", "b", "c"]

    def test_tree_passes_schema_check(self):
        build_doc(scan_markdown("# T\n\nhttps://a.com and\nmore\n\n## U")).check()


class TestMarkdownToDocConverter:
    def test_convert(self, converter):
        tree = converter.convert("# Hello\n\nWorld")
        assert [block.kind for block in tree.content] == [NodeKind.HEADING, NodeKind.PARAGRAPH]

    def test_debug_dump_tokens(self, capsys):
        converter = MarkdownToDocConverter(NotedownConfig(debug_dump_tokens=True))
        converter.convert("Hi https://x.org")
        err = capsys.readouterr().err
        assert "[notedown] Scanned tokens:" in err
        payload = json.loads(err.split("Scanned tokens:", 1)[1])
        assert payload == [[
            {"type": "text", "content": "Hi "},
            {"type": "url", "content": "https://x.org"},
        ]]

    def test_no_dump_by_default(self, converter, capsys):
        converter.convert("Hi")
        assert capsys.readouterr().err == ""
