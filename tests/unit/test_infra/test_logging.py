"""Unit tests for the logging infrastructure."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator

import pytest
from opentelemetry import trace
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags

from analytics_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    configure_logging,
    get_lazy_logger,
    get_log_context,
    remove_from_log_context,
    set_log_context,
    setup_logging,
)
from analytics_service.infra.logging import config as logging_config


def make_record(msg: str = "hello %s", args: tuple = ("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="analytics_service.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _clean_context() -> Iterator[None]:
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    """Undo dictConfig changes to the root logger."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogContext:
    """Tests for the contextvars log context."""

    def test_set_and_remove(self):
        set_log_context(request_id="r1", tenant_id="t1")
        remove_from_log_context("tenant_id")

        assert get_log_context() == {"request_id": "r1"}

    def test_get_returns_copy(self):
        set_log_context(request_id="r1")
        get_log_context()["request_id"] = "changed"

        assert get_log_context() == {"request_id": "r1"}

    def test_filter_injects_context(self):
        set_log_context(request_id="r1")
        record = make_record()

        assert ContextInjectingFilter().filter(record) is True
        assert record.request_id == "r1"

    def test_filter_keeps_existing_attributes(self):
        set_log_context(query_label="from-context")
        record = make_record(query_label="explicit")

        ContextInjectingFilter().filter(record)

        assert record.query_label == "explicit"


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        formatter = JSONFormatter(static={"service": "analytics-service"})

        data = json.loads(formatter.format(make_record(query_label="stream_events")))

        assert data["level"] == "WARNING"
        assert data["logger"] == "analytics_service.test"
        assert data["message"] == "hello world"
        assert data["service"] == "analytics-service"
        assert data["query_label"] == "stream_events"
        assert data["timestamp"].endswith("Z")
        assert "trace_id" not in data
        assert "msg" not in data

    def test_process_info(self):
        data = json.loads(JSONFormatter(include_process_info=True).format(make_record()))

        assert "process_id" in data
        assert "process_name" in data

    def test_exception_single_line(self):
        try:
            raise ValueError("bad row")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        line = JSONFormatter().format(record)

        assert "\n" not in line
        assert "ValueError: bad row" in json.loads(line)["exception"]

    def test_trace_correlation(self):
        context = SpanContext(
            trace_id=0x1234,
            span_id=0x5678,
            is_remote=False,
            trace_flags=TraceFlags(TraceFlags.SAMPLED),
        )

        with trace.use_span(NonRecordingSpan(context)):
            data = json.loads(JSONFormatter().format(make_record()))

        assert data["trace_id"] == format(0x1234, "032x")
        assert data["span_id"] == format(0x5678, "016x")

    def test_non_serializable_extra(self):
        data = json.loads(JSONFormatter().format(make_record(cursor=object())))

        assert data["cursor"].startswith("<object object")


class TestLazyLogging:
    """Tests for lazy message evaluation."""

    def test_disabled_level_skips_evaluation(self):
        logging.getLogger("analytics_service.test.lazy").setLevel(logging.INFO)
        calls: list[int] = []

        get_lazy_logger("analytics_service.test.lazy").debug(lambda: calls.append(1) or "msg")

        assert calls == []

    def test_enabled_level_evaluates(self, caplog: pytest.LogCaptureFixture):
        lazy_logger = get_lazy_logger("analytics_service.test.lazy")

        with caplog.at_level(logging.DEBUG, logger="analytics_service.test.lazy"):
            lazy_logger.debug(lambda: "computed")
            lazy_logger.info("total=%s", lambda: 42)

        assert [r.getMessage() for r in caplog.records] == ["computed", "total=42"]


class TestConfigureLogging:
    """Tests for dictConfig setup."""

    def test_json_handler(self, restore_root_logger: logging.Logger):
        configure_logging(log_level="WARNING", json_logs=True, capture_warnings=False)

        handler = restore_root_logger.handlers[-1]
        assert isinstance(handler.formatter, JSONFormatter)
        assert handler.formatter.static == {"service": "analytics-service"}
        assert any(isinstance(f, ContextInjectingFilter) for f in handler.filters)
        assert restore_root_logger.level == logging.WARNING

    def test_text_handler_without_context(self, restore_root_logger: logging.Logger):
        configure_logging(json_logs=False, include_context=False, capture_warnings=False)

        handler = restore_root_logger.handlers[-1]
        assert not isinstance(handler.formatter, JSONFormatter)
        assert handler.filters == []

    def test_setup_logging_runs_once(
        self, restore_root_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
    ):
        calls: list[dict] = []
        monkeypatch.setattr(logging_config, "_LOGGING_INITIALIZED", False)
        monkeypatch.setattr(logging_config, "configure_logging", lambda **kw: calls.append(kw))

        setup_logging()
        setup_logging()
        setup_logging(force=True, log_level="DEBUG")

        assert len(calls) == 2
        assert calls[1]["log_level"] == "DEBUG"
