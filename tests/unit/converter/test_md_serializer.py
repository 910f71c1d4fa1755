"""Unit tests for the Markdown serializer."""

import pytest

from notedown.converter.md_serializer import MarkdownSerializer, serialize_markdown
from notedown.errors import ErrorCode, NotedownUnknownNodeKindError
from notedown.schema import Node, NodeKind, doc, hard_break, heading, link, paragraph, text


class TestSerialize:
    def test_simple_paragraph(self, serializer):
        assert serializer.serialize(doc(paragraph("Hello, world!"))) == "Hello, world!\n\n"

    def test_heading(self, serializer):
        assert serializer.serialize(doc(heading(2, "## Hello, world!"))) == "## Hello, world!\n\n"

    def test_hard_breaks(self, serializer):
        tree = doc(paragraph("Hello", hard_break(), "world"))
        assert serializer.serialize(tree) == "Hello\nworld\n\n"

    def test_links_become_plain_urls(self, serializer):
        tree = doc(paragraph(
            "Hello, ",
            text("https://example.com", [link("https://example.com")]),
            "!",
        ))
        assert serializer.serialize(tree) == "Hello, https://example.com!\n\n"

    def test_mixed_content(self, serializer):
        tree = doc(paragraph(
            "Hello, ",
            text("https://example.com", [link("https://example.com")]),
            hard_break(),
            "world!",
        ))
        assert serializer.serialize(tree) == "Hello, https://example.com\nworld!\n\n"

    def test_link_emits_href_not_visible_text(self, serializer):
        tree = doc(paragraph(text("click here", [link("https://x.org")])))
        assert serializer.serialize(tree) == "https://x.org\n\n"

    def test_empty_doc(self, serializer):
        assert serializer.serialize(doc()) == ""

    def test_empty_paragraph(self, serializer):
        assert serializer.serialize(doc(paragraph())) == "\n\n"

    def test_several_blocks(self):
        tree = doc(heading(1, "# T"), paragraph("a"), paragraph("b"))
        assert serialize_markdown(tree) == "# T\n\na\n\nb\n\n"


class TestUnknownNodeKind:
    @pytest.mark.parametrize("node", [text("stray"), hard_break()])
    def test_raises(self, node):
        tree = Node(NodeKind.DOC, (paragraph("ok"), node))
        with pytest.raises(NotedownUnknownNodeKindError) as exc_info:
            MarkdownSerializer().serialize(tree)
        assert exc_info.value.code == ErrorCode.UNKNOWN_NODE_KIND
        assert exc_info.value.context["index"] == 1
        assert node.kind.value in str(exc_info.value)
