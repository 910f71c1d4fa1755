"""Scanner token types.

The scanner turns Markdown text into blocks of flat tokens.  Each token
kind is a small frozen dataclass; :data:`Token` is the union of all of
them and :data:`TokenBlock` is one blank-line-delimited group.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class TokenType(str, Enum):
    """Discriminator shared by every token class."""

    HEADING = "heading"
    LINE_BREAK = "lineBreak"
    URL = "url"
    TEXT = "text"


@dataclass(frozen=True)
class HeadingToken:
    """A line starting with ``#``.

    Attributes
    ----------
    level:
        Count of leading ``#`` characters.  Not clamped; the document
        builder clamps it to 1–6.
    content:
        The whole line, hash prefix included, with surrounding
        whitespace trimmed.
    """

    level: int
    content: str
    type: TokenType = TokenType.HEADING


@dataclass(frozen=True)
class LineBreakToken:
    """End-of-line boundary between two non-blank lines of one block."""

    type: TokenType = TokenType.LINE_BREAK


@dataclass(frozen=True)
class UrlToken:
    """A substring matched by the URL pattern."""

    content: str
    type: TokenType = TokenType.URL


@dataclass(frozen=True)
class TextToken:
    """Literal text between URLs.  Never empty."""

    content: str
    type: TokenType = TokenType.TEXT


Token = Union[HeadingToken, LineBreakToken, UrlToken, TextToken]

TokenBlock = list[Token]


def token_to_dict(token: Token) -> dict:
    """Return a JSON-friendly view of *token* (used for debug dumps)."""
    result: dict = {"type": token.type.value}
    if isinstance(token, HeadingToken):
        result["level"] = token.level
    if isinstance(token, (HeadingToken, UrlToken, TextToken)):
        result["content"] = token.content
    return result
