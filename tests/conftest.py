"""Shared test fixtures for the notedown test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from notedown.config import NotedownConfig
from notedown.converter.md_serializer import MarkdownSerializer
from notedown.converter.md_to_doc import MarkdownToDocConverter
from notedown.editor.session import EditorSession


class RecordingMetricsHook:
    """A metrics backend that records all calls for assertion."""

    def __init__(self) -> None:
        self.increments: list[dict[str, Any]] = []
        self.timings: list[dict[str, Any]] = []
        self.gauges: list[dict[str, Any]] = []

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.increments.append({"name": name, "value": value, "tags": tags})

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.timings.append({"name": name, "ms": ms, "tags": tags})

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.gauges.append({"name": name, "value": value, "tags": tags})

    def names(self) -> list[str]:
        return [call["name"] for call in self.increments]


@pytest.fixture
def config() -> NotedownConfig:
    """Default editor configuration."""
    return NotedownConfig()


@pytest.fixture
def metrics() -> RecordingMetricsHook:
    return RecordingMetricsHook()


@pytest.fixture
def converter(config: NotedownConfig) -> MarkdownToDocConverter:
    """Markdown-to-document converter using the default config."""
    return MarkdownToDocConverter(config)


@pytest.fixture
def serializer() -> MarkdownSerializer:
    return MarkdownSerializer()


@pytest.fixture
def make_session(metrics: RecordingMetricsHook) -> Callable[..., EditorSession]:
    """Factory building a session from Markdown with a recording metrics hook."""

    def _make(markdown: str = "", **overrides: Any) -> EditorSession:
        overrides.setdefault("metrics", metrics)
        return EditorSession.from_markdown(markdown, NotedownConfig(**overrides))

    return _make
