"""Scan Markdown text into blocks of flat tokens.

The scanner understands exactly the editor's wire grammar:

* a line starting with ``#`` is a heading line,
* bare ``scheme://`` URLs anywhere in other lines,
* a single newline inside a block is a line break,
* a blank line ends a block.

It never fails: every string maps to a (possibly empty) list of blocks.
"""

from __future__ import annotations

import re
from functools import lru_cache

from notedown.config import DEFAULT_URL_SCHEMES, NotedownConfig
from notedown.models import (
    HeadingToken,
    LineBreakToken,
    TextToken,
    Token,
    TokenBlock,
    UrlToken,
)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

HEADING_PREFIX_RE = re.compile(r"^(#{1,6}) ")
"""A line that is a heading once typed: 1-6 hashes and a space."""

_URL_BODY = r"://[-A-Z0-9+&@#/%?=~_|!:,.;]*[-A-Z0-9+&@#/%=~_|]"


@lru_cache(maxsize=16)
def url_pattern(schemes: tuple[str, ...] = DEFAULT_URL_SCHEMES) -> re.Pattern[str]:
    """Return the compiled URL pattern for *schemes*.

    A URL is ``scheme://`` followed by a run of URL-safe characters that
    ends on a non-punctuation character at a word boundary, so trailing
    ``.``/``,``/``!`` stay outside the match.
    """
    alternation = "|".join(re.escape(scheme) for scheme in schemes)
    return re.compile(rf"\b(?:{alternation}){_URL_BODY}\b", re.IGNORECASE)


DEFAULT_URL_RE = url_pattern()


def heading_level(line: str) -> int | None:
    """Return the heading level implied by *line*, or ``None``."""
    match = HEADING_PREFIX_RE.match(line)
    return len(match.group(1)) if match else None


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

def scan_line(line: str, pattern: re.Pattern[str] = DEFAULT_URL_RE) -> list[Token]:
    """Scan a single line (no newlines) into tokens."""
    if line.startswith("#"):
        level = len(line) - len(line.lstrip("#"))
        return [HeadingToken(level=level, content=line.strip())]

    tokens: list[Token] = []
    last = 0
    for match in pattern.finditer(line):
        if match.start() > last:
            tokens.append(TextToken(line[last:match.start()]))
        tokens.append(UrlToken(match.group(0)))
        last = match.end()
    if last < len(line):
        tokens.append(TextToken(line[last:]))
    return tokens


def scan_markdown(markdown: str, pattern: re.Pattern[str] = DEFAULT_URL_RE) -> list[TokenBlock]:
    """Scan *markdown* into blocks of tokens.

    A line break token is emitted between two consecutive non-blank
    lines.  Blank (or whitespace-only) lines end the current block.
    """
    blocks: list[TokenBlock] = []
    current: TokenBlock = []
    previous_blank = True

    for line in markdown.split("\n"):
        if not line.strip():
            if current:
                blocks.append(current)
                current = []
            previous_blank = True
            continue
        if not previous_blank:
            current.append(LineBreakToken())
        current.extend(scan_line(line, pattern))
        previous_blank = False

    if current:
        blocks.append(current)
    return blocks


class MarkdownScanner:
    """Scanner bound to the URL schemes of a :class:`NotedownConfig`."""

    def __init__(self, config: NotedownConfig | None = None) -> None:
        self._config = config or NotedownConfig()
        self.pattern = url_pattern(self._config.url_schemes)

    def scan(self, markdown: str) -> list[TokenBlock]:
        return scan_markdown(markdown, self.pattern)
