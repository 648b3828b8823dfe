"""Tests for logging configuration."""

import json
import logging

import pytest

from src.forcelogout.utils.logging_config import (
    ColoredConsoleFormatter,
    LogFormat,
    LoggingConfig,
    LogLevel,
    SensitiveDataFilter,
    StructuredFormatter,
    setup_logging,
)


def make_record(msg, args=(), level=logging.INFO, **extra):
    record = logging.LogRecord("forcelogout.test", level, __file__, 10, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLoggingConfig:
    """Test LoggingConfig functionality."""

    def test_default_config(self):
        config = LoggingConfig()

        assert config.level == LogLevel.INFO
        assert config.format_type == LogFormat.DETAILED
        assert config.console_colors is True
        assert config.log_sdk_requests is False

    def test_from_dict(self):
        config = LoggingConfig.from_dict({"level": "debug", "format": "JSON"})

        assert config.level == LogLevel.DEBUG
        assert config.format_type == LogFormat.JSON

    def test_from_dict_falls_back_on_unknown_values(self):
        config = LoggingConfig.from_dict({"level": "chatty", "format": "xml"})

        assert config.level == LogLevel.INFO
        assert config.format_type == LogFormat.DETAILED


class TestSensitiveDataFilter:
    """Test secret redaction."""

    @pytest.fixture
    def log_filter(self):
        return SensitiveDataFilter(LoggingConfig().sensitive_data_patterns)

    def test_redacts_message(self, log_filter):
        record = make_record("POST /force-logout?key=hunter2&immediate=true")

        assert log_filter.filter(record) is True
        assert "hunter2" not in record.msg
        assert "[REDACTED]" in record.msg
        assert "immediate=true" in record.msg

    def test_redacts_string_args(self, log_filter):
        record = make_record("header %s, count %d", ("Bearer abc.def-ghi", 3))

        log_filter.filter(record)

        assert record.args == ("[REDACTED]", 3)


class TestFormatters:
    """Test the console and JSON formatters."""

    def test_structured_formatter(self):
        record = make_record("Fetched page %d", (2,), user_id="u-1")

        data = json.loads(StructuredFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "forcelogout.test"
        assert data["message"] == "Fetched page 2"
        assert data["extra"] == {"user_id": "u-1"}

    def test_colored_formatter_without_tty(self):
        formatter = ColoredConsoleFormatter(use_colors=False)

        output = formatter.format(make_record("hello", level=logging.WARNING))

        assert "WARNING" in output
        assert "forcelogout.test - hello" in output
        assert "\033[" not in output


class TestSetupLogging:
    """Test setup_logging."""

    def test_configures_package_logger(self):
        logger = setup_logging(LoggingConfig(level=LogLevel.DEBUG, format_type=LogFormat.JSON))

        assert logger.name == "forcelogout"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
        assert logger.propagate is False
        assert logging.getLogger("botocore").level == logging.WARNING

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1

    def test_sdk_logging_can_be_enabled(self):
        setup_logging(LoggingConfig(log_sdk_requests=True))

        assert logging.getLogger("firebase_admin").level == logging.DEBUG
        setup_logging()
