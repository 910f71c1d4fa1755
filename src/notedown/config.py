"""Editor configuration for notedown.

:class:`NotedownConfig` is a plain dataclass that captures every tuneable
knob of the editing core.  Instances are passed to the converter, the
normalizer, the paste pipeline, and :class:`~notedown.editor.session.EditorSession`.

The module-level constant :data:`DEFAULT_URL_SCHEMES` lists the schemes
recognised as bare links.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

DEFAULT_URL_SCHEMES: tuple[str, ...] = ("http", "https", "ftp", "file")
"""URL schemes the scanner and the autolink pass turn into links."""


@dataclass
class NotedownConfig:
    """Complete configuration for a notedown editing session.

    Every parameter has a sensible default.

    Parameters
    ----------
    url_schemes:
        Schemes recognised in ``scheme://`` URLs.  Matching is
        case-insensitive.
    paste_link_policy:
        What to do with link marks on pasted text.

        * ``"strip"``: drop them; the autolink pass recomputes links
          from the inserted text.
        * ``"keep"``: leave them in place.  They are still re-derived by
          the autolink pass once the paste is committed.
    seed_empty_paragraph:
        When a session is loaded from text with no blocks, insert one empty
        paragraph so the caret has somewhere to live.
    normalize_on_load:
        Run the normalization engine once on the freshly built tree.
    metrics:
        Optional :class:`~notedown.observability.MetricsHook` backend.
    debug_dump_tokens:
        Write the scanner output to *stderr* on each conversion.
    debug_dump_steps:
        Write each committed transaction's steps to *stderr*.
    """

    # ── Links ───────────────────────────────────────────────────────────
    url_schemes: tuple[str, ...] = DEFAULT_URL_SCHEMES

    # ── Paste ───────────────────────────────────────────────────────────
    paste_link_policy: Literal["strip", "keep"] = "strip"

    # ── Session ─────────────────────────────────────────────────────────
    seed_empty_paragraph: bool = True

    normalize_on_load: bool = True

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_tokens: bool = False

    debug_dump_steps: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.url_schemes = tuple(self.url_schemes)
        if not self.url_schemes:
            raise ValueError("url_schemes must contain at least one scheme")
        for scheme in self.url_schemes:
            if not scheme or not scheme.isalnum():
                raise ValueError(f"url_schemes entries must be alphanumeric, got {scheme!r}")
        if self.paste_link_policy not in ("strip", "keep"):
            raise ValueError(
                f"paste_link_policy must be 'strip' or 'keep', got {self.paste_link_policy!r}"
            )
