"""Unit tests for the Markdown scanner."""

import pytest

from notedown.config import NotedownConfig
from notedown.converter.scanner import (
    MarkdownScanner,
    heading_level,
    scan_line,
    scan_markdown,
    url_pattern,
)
from notedown.models import HeadingToken, LineBreakToken, TextToken, UrlToken, token_to_dict


def _dicts(blocks):
    return [[token_to_dict(token) for token in block] for block in blocks]


# =========================================================================
# Block and line structure
# =========================================================================

class TestBlocks:
    def test_plain_text(self):
        text = "This is a test string without links or headings."
        assert _dicts(scan_markdown(text)) == [[{"type": "text", "content": text}]]

    def test_heading_block(self):
        result = scan_markdown("# Heading 1\n\nThis is a test string with a heading.")
        assert _dicts(result) == [
            [{"type": "heading", "level": 1, "content": "# Heading 1"}],
            [{"type": "text", "content": "This is a test string with a heading."}],
        ]

    def test_line_break(self):
        result = scan_markdown("This is a test\nstring with a line break.")
        assert _dicts(result) == [[
            {"type": "text", "content": "This is a test"},
            {"type": "lineBreak"},
            {"type": "text", "content": "string with a line break."},
        ]]

    def test_blank_line_ends_block(self):
        result = scan_markdown("This is a test\n\nstring with multiple\nline breaks.")
        assert _dicts(result) == [
            [{"type": "text", "content": "This is a test"}],
            [
                {"type": "text", "content": "string with multiple"},
                {"type": "lineBreak"},
                {"type": "text", "content": "line breaks."},
            ],
        ]

    def test_empty_input(self):
        assert scan_markdown("") == []

    def test_only_newlines(self):
        assert scan_markdown("\n\n") == []
        assert scan_markdown("\n\n\n\n") == []

    def test_whitespace_only_line_is_blank(self):
        result = scan_markdown("one\n   \ntwo")
        assert len(result) == 2
        assert result[0] == [TextToken("one")]
        assert result[1] == [TextToken("two")]

    def test_several_blank_lines_produce_one_boundary(self):
        assert len(scan_markdown("a\n\n\n\nb")) == 2

    def test_url_followed_by_heading_in_same_block(self):
        result = scan_markdown("https://google.com\n# Heading")
        assert _dicts(result) == [[
            {"type": "url", "content": "https://google.com"},
            {"type": "lineBreak"},
            {"type": "heading", "level": 1, "content": "# Heading"},
        ]]


# =========================================================================
# Headings
# =========================================================================

class TestHeadings:
    @pytest.mark.parametrize("level", range(1, 7))
    def test_levels(self, level):
        line = "#" * level + " Title"
        assert scan_line(line) == [HeadingToken(level=level, content=line)]

    def test_level_is_not_clamped(self):
        token = scan_line("######## deep")[0]
        assert isinstance(token, HeadingToken)
        assert token.level == 8

    def test_hash_without_space_is_still_a_heading_token(self):
        assert scan_line("#hashtag") == [HeadingToken(level=1, content="#hashtag")]

    def test_content_is_trimmed(self):
        assert scan_line("## Title   ")[0].content == "## Title"

    def test_heading_level_helper(self):
        assert heading_level("### x") == 3
        assert heading_level("#x") is None
        assert heading_level("####### x") is None
        assert heading_level(" # x") is None


# =========================================================================
# URLs
# =========================================================================

class TestUrls:
    def test_url_inside_text(self):
        result = scan_markdown("This is a test string with a link: https://example.com.")
        assert _dicts(result) == [[
            {"type": "text", "content": "This is a test string with a link: "},
            {"type": "url", "content": "https://example.com"},
            {"type": "text", "content": "."},
        ]]

    def test_markdown_link_syntax_is_not_parsed(self):
        result = scan_markdown(
            "# Heading 1\n\nThis is a test string with a [link](https://example.com) and a heading."
        )
        assert _dicts(result)[1] == [
            {"type": "text", "content": "This is a test string with a [link]("},
            {"type": "url", "content": "https://example.com"},
            {"type": "text", "content": ") and a heading."},
        ]

    def test_urls_at_line_edges(self):
        result = scan_markdown("https://google.com\nGo to Google and Bing.\nhttps://bing.com")
        assert result == [[
            UrlToken("https://google.com"),
            LineBreakToken(),
            TextToken("Go to Google and Bing."),
            LineBreakToken(),
            UrlToken("https://bing.com"),
        ]]

    def test_consecutive_urls(self):
        assert scan_markdown("https://google.com https://bing.com") == [[
            UrlToken("https://google.com"),
            TextToken(" "),
            UrlToken("https://bing.com"),
        ]]

    def test_url_at_end_of_line_before_break(self):
        assert scan_markdown("Go to https://google.com\nFor more information.") == [[
            TextToken("Go to "),
            UrlToken("https://google.com"),
            LineBreakToken(),
            TextToken("For more information."),
        ]]

    @pytest.mark.parametrize("url", [
        "http://example.com/path?q=1&r=2",
        "ftp://files.example.org/pub",
        "file:///tmp/notes.txt",
        "HTTPS://EXAMPLE.COM",
    ])
    def test_supported_schemes(self, url):
        assert scan_line(f"see {url} now") == [
            TextToken("see "), UrlToken(url), TextToken(" now"),
        ]

    @pytest.mark.parametrize("trailing", [".", ",", "!", ";", ":"])
    def test_trailing_punctuation_excluded(self, trailing):
        tokens = scan_line(f"https://example.com{trailing}")
        assert tokens == [UrlToken("https://example.com"), TextToken(trailing)]

    def test_unknown_scheme_is_text(self):
        assert scan_line("mailto://someone") == [TextToken("mailto://someone")]

    def test_configured_schemes(self):
        scanner = MarkdownScanner(NotedownConfig(url_schemes=("gopher",)))
        assert scanner.scan("gopher://hole https://x.org") == [[
            UrlToken("gopher://hole"),
            TextToken(" https://x.org"),
        ]]

    def test_pattern_is_cached(self):
        assert url_pattern(("http",)) is url_pattern(("http",))
