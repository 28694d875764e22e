"""Tests for structured logging configuration."""

import logging

import structlog

from bitcoin_accounting.config import Settings
from bitcoin_accounting.logging_config import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_console_processors,
    get_json_processors,
    get_logger,
)


class TestProcessors:
    def test_json_processors_end_with_json_renderer(self):
        processors = get_json_processors()

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_processors_end_with_console_renderer(self):
        processors = get_console_processors()

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_both_merge_context(self):
        assert structlog.contextvars.merge_contextvars in get_json_processors()
        assert structlog.contextvars.merge_contextvars in get_console_processors()


class TestLogContext:
    def test_binds_and_unbinds(self):
        clear_context()

        with LogContext(txid="abc"):
            assert structlog.contextvars.get_contextvars() == {"txid": "abc"}

        assert structlog.contextvars.get_contextvars() == {}

    def test_leaves_outer_context_alone(self):
        clear_context()
        bind_context(request="r1")

        with LogContext(txid="abc"):
            pass

        assert structlog.contextvars.get_contextvars() == {"request": "r1"}
        clear_context()


class TestConfigureLogging:
    def test_json_format_logs_events(self, tmp_path, caplog):
        settings = Settings(log_format="json", log_file=tmp_path / "logs" / "btca.log")
        root = logging.getLogger()
        handlers = list(root.handlers)
        try:
            configure_logging(settings)
            get_logger("bitcoin_accounting.test").warning("ledger_event", txid="abc")
        finally:
            structlog.reset_defaults()
            for handler in root.handlers[:]:
                if handler not in handlers:
                    root.removeHandler(handler)
                    handler.close()

        assert "ledger_event" in caplog.text
        assert (tmp_path / "logs" / "btca.log").exists()
