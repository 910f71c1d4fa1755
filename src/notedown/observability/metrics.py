"""Metrics hook protocol and no-op default implementation.

notedown emits counters and timings at the points where the editing core
does work on behalf of the host: committing transactions, applying
normalization corrections, and sanitizing pasted content.  By default a
:class:`NoopMetricsHook` is used so there is zero overhead.  Hosts can
supply their own implementation that satisfies the :class:`MetricsHook`
protocol.

Usage::

    from notedown.observability.metrics import MetricsHook, NoopMetricsHook

    assert isinstance(my_backend, MetricsHook)

Emitted metric names, by emitter:

``EditorSession.dispatch`` (once per commit)

* ``notedown.transactions_total``          -- counter, tag ``corrected``
* ``notedown.commit_duration_ms``          -- timing of normalize + store
* ``notedown.doc_size``                    -- gauge, content size of the
  committed document in positions

``Normalizer.normalize``

* ``notedown.normalize_corrections_total`` -- counter
* ``notedown.normalize_skipped_total``     -- counter, tag ``reason``
  (``between_blocks``, ``out_of_range``, ...)

``EditorSession.paste``

* ``notedown.paste_sanitized_total``       -- counter
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict whose keys and values are
    strings.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric.

        Parameters
        ----------
        name:
            Dot-delimited metric name, e.g. ``"notedown.transactions_total"``.
        value:
            Amount to increment by.  Defaults to ``1``.
        tags:
            Optional key-value tags for the data point.
        """
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value.

        The session reports the committed document size this way, so a
        backend sees the latest size rather than a running sum.
        """
        ...


class NoopMetricsHook:
    """Default metrics implementation that silently discards all data points.

    Used when the config does not supply a backend, so call sites never
    need ``if self._metrics is not None`` guards.
    """

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(metrics: Any | None) -> Any:
    """Return *metrics*, or a :class:`NoopMetricsHook` when it is ``None``."""
    return metrics if metrics is not None else NoopMetricsHook()
