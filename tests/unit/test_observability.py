"""Tests for observability/logger.py and observability/metrics.py"""
import io
import json
import logging
import sys

from notedown.observability import (
    MetricsHook,
    NoopMetricsHook,
    StructuredFormatter,
    get_logger,
    log_event,
    resolve_metrics,
)


class TestStructuredFormatter:
    def _get_record(
        self,
        msg,
        level=logging.INFO,
        exc_info=None,
        stack_info=None,
        extra_fields=None,
    ):
        record = logging.LogRecord(
            name="test",
            level=level,
            pathname="",
            lineno=0,
            msg=msg,
            args=(),
            exc_info=exc_info,
        )
        if extra_fields is not None:
            record.extra_fields = extra_fields
        if stack_info is not None:
            record.stack_info = stack_info
        return record

    def test_basic_format(self):
        result = json.loads(StructuredFormatter().format(self._get_record("hello world")))
        assert result["message"] == "hello world"
        assert result["level"] == "INFO"
        assert result["logger"] == "test"
        assert "ts" in result

    def test_extra_fields_merged(self):
        record = self._get_record("msg", extra_fields={"op": "normalize", "steps": 3})
        result = json.loads(StructuredFormatter().format(record))
        assert result["op"] == "normalize"
        assert result["steps"] == 3

    def test_exception_info_included(self):
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()
        record = self._get_record("error msg", exc_info=exc_info)
        result = json.loads(StructuredFormatter().format(record))
        assert "ValueError" in result["exception"]

    def test_stack_info_included(self):
        record = self._get_record("msg", stack_info="Stack Trace Here")
        result = json.loads(StructuredFormatter().format(record))
        assert result["stack_info"] == "Stack Trace Here"

    def test_non_json_values_stringified(self):
        record = self._get_record("msg", extra_fields={"obj": object()})
        result = json.loads(StructuredFormatter().format(record))
        assert result["obj"].startswith("<object")


class TestGetLogger:
    def test_returns_logger_with_handler(self):
        logger = get_logger("test.notedown.unique1")
        assert isinstance(logger, logging.Logger)
        assert len(logger.handlers) > 0
        assert logger.propagate is False

    def test_default_level_is_warning(self):
        assert get_logger("test.notedown.unique_default").level == logging.WARNING

    def test_string_level(self):
        logger = get_logger("test.notedown.unique2", level="debug")
        assert logger.level == logging.DEBUG

    def test_idempotent_no_duplicate_handlers(self):
        name = "test.notedown.unique3"
        handler_count = len(get_logger(name).handlers)
        assert len(get_logger(name).handlers) == handler_count

    def test_custom_stream(self):
        stream = io.StringIO()
        logger = get_logger("test.notedown.stream_unique", level=logging.INFO, stream=stream)
        logger.info("test message", extra={"extra_fields": {"key": "val"}})
        payload = json.loads(stream.getvalue())
        assert payload["message"] == "test message"
        assert payload["key"] == "val"

    def test_editor_loggers_exist(self):
        import notedown.editor.session  # noqa: F401

        for name in ("notedown.normalize", "notedown.commands", "notedown.session"):
            assert logging.getLogger(name).handlers


class TestLogEvent:
    def test_fields_become_extra(self):
        stream = io.StringIO()
        logger = get_logger("test.notedown.event1", level=logging.DEBUG, stream=stream)
        log_event(logger, logging.DEBUG, "Transaction committed", steps=2, corrected=True)
        payload = json.loads(stream.getvalue())
        assert payload["message"] == "Transaction committed"
        assert payload["steps"] == 2
        assert payload["corrected"] is True

    def test_disabled_level_emits_nothing(self):
        stream = io.StringIO()
        logger = get_logger("test.notedown.event2", stream=stream)
        log_event(logger, logging.DEBUG, "quiet", steps=1)
        assert stream.getvalue() == ""


class TestMetrics:
    def test_noop_satisfies_protocol(self):
        assert isinstance(NoopMetricsHook(), MetricsHook)

    def test_noop_methods_return_none(self):
        hook = NoopMetricsHook()
        assert hook.increment("notedown.transactions_total") is None
        assert hook.timing("notedown.commit_duration_ms", 1.5) is None
        assert hook.gauge("notedown.doc_size", 10.0, tags={"env": "test"}) is None

    def test_recording_hook_satisfies_protocol(self, metrics):
        assert isinstance(metrics, MetricsHook)

    def test_resolve_metrics(self, metrics):
        assert isinstance(resolve_metrics(None), NoopMetricsHook)
        assert resolve_metrics(metrics) is metrics

    def test_object_missing_methods_is_not_a_hook(self):
        class Partial:
            def increment(self, name, value=1, tags=None):
                pass

        assert not isinstance(Partial(), MetricsHook)
