"""Tests for structlog processor configuration."""

import logging

import structlog

from src.config.settings import get_settings
from src.observability.logging import QUIET_LOGGERS, build_processors, setup_logging
from src.observability.tracing import add_trace_context


class TestBuildProcessors:
    def test_json_output_ends_with_json_renderer(self):
        processors = build_processors(json_output=True, with_trace_context=False)

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.processors.format_exc_info in processors

    def test_console_output_ends_with_console_renderer(self):
        processors = build_processors(json_output=False, with_trace_context=False)

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_trace_context_only_when_requested(self):
        assert add_trace_context not in build_processors(False, False)
        assert add_trace_context in build_processors(False, True)

    def test_contextvars_merged_first(self):
        processors = build_processors(json_output=True, with_trace_context=False)

        assert processors[0] is structlog.contextvars.merge_contextvars


class TestSetupLogging:
    def teardown_method(self):
        get_settings.cache_clear()
        structlog.reset_defaults()

    def test_quiet_loggers_raised_to_warning(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        get_settings.cache_clear()

        setup_logging()

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_debug_override_leaves_quiet_loggers_alone(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        get_settings.cache_clear()
        logging.getLogger("httpx").setLevel(logging.NOTSET)

        setup_logging("debug")

        assert logging.getLogger("httpx").level == logging.NOTSET
