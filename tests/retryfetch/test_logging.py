"""Tests for retryfetch.logging module."""

from __future__ import annotations

import io
import json
import logging

from retryfetch.logging import (
    CorrelationContext,
    JsonFormatter,
    LoggerAdapter,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)


def _json_logger(name: str) -> tuple[logging.Logger, io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger = logging.getLogger(name)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger, stream


class TestGetLogger:
    """Tests for get_logger function."""

    def test_returns_logger_adapter(self) -> None:
        """get_logger returns a LoggerAdapter instance."""
        assert isinstance(get_logger(__name__), LoggerAdapter)

    def test_logger_has_null_handler(self) -> None:
        """Logger has NullHandler when no handlers configured."""
        logger = get_logger(f"{__name__}.test_null_handler")
        handlers = logger.logger.handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.NullHandler)


class TestJsonFormatter:
    """Tests for JsonFormatter class."""

    def test_formats_as_json(self) -> None:
        """JsonFormatter produces valid JSON output with extra fields."""
        logger, stream = _json_logger(f"{__name__}.test_json")
        logger.info("Fetch done", extra={"operation": "fetch", "status": "success", "attempt": 2})

        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "Fetch done"
        assert data["level"] == "INFO"
        assert data["operation"] == "fetch"
        assert data["status"] == "success"
        assert data["attempt"] == 2
        assert data["ts"].endswith("Z")

    def test_includes_correlation_id_from_context(self) -> None:
        """JsonFormatter includes correlation_id from contextvars."""
        logger, stream = _json_logger(f"{__name__}.test_correlation")
        with CorrelationContext(correlation_id="req-42"):
            logger.info("Test message")
        data = json.loads(stream.getvalue().strip())
        assert data["correlation_id"] == "req-42"


class TestLoggerAdapter:
    """Tests for structured field injection."""

    def test_injects_operation_and_status(self) -> None:
        """Missing operation and status are filled in."""
        base, stream = _json_logger(f"{__name__}.test_adapter")
        LoggerAdapter(base, {}).warning("careful")
        data = json.loads(stream.getvalue().strip())
        assert data["operation"] == "unknown"
        assert data["status"] == "warning"

    def test_adapter_extra_on_every_record(self) -> None:
        """Adapter extra appears on every record; per-call extra wins."""
        base, stream = _json_logger(f"{__name__}.test_adapter_extra")
        adapter = LoggerAdapter(base, {"operation": "fetch", "url": "http://x.test/"})
        adapter.info("one")
        adapter.error("two", extra={"url": "http://y.test/"})
        first, second = (json.loads(line) for line in stream.getvalue().splitlines())
        assert first["url"] == "http://x.test/"
        assert first["status"] == "success"
        assert second["url"] == "http://y.test/"
        assert second["status"] == "error"


class TestCorrelationContext:
    """Tests for CorrelationContext context manager."""

    def test_sets_and_restores(self) -> None:
        """CorrelationContext restores the previous correlation_id on exit."""
        set_correlation_id("outer")
        try:
            with CorrelationContext(correlation_id="inner"):
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"
        finally:
            set_correlation_id(None)
        assert get_correlation_id() is None
