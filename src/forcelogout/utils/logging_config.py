"""Logging configuration for forcelogout."""

import json
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class LogLevel(str, Enum):
    """Log levels for configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


@dataclass
class LoggingConfig:
    """Configuration for logging system."""

    level: LogLevel = LogLevel.INFO
    format_type: LogFormat = LogFormat.DETAILED
    console_colors: bool = True
    log_sdk_requests: bool = False
    sensitive_data_patterns: List[str] = field(
        default_factory=lambda: [
            r"(api[_-]?key|secret|token|password)=[^\s&]+",
            r"Bearer\s+[A-Za-z0-9\-_\.]+",
        ]
    )

    @classmethod
    def from_dict(cls, data: dict) -> "LoggingConfig":
        """Build a LoggingConfig from the ``logging`` config section."""
        try:
            level = LogLevel(str(data.get("level", "INFO")).upper())
        except ValueError:
            level = LogLevel.INFO
        try:
            format_type = LogFormat(str(data.get("format", "detailed")).lower())
        except ValueError:
            format_type = LogFormat.DETAILED
        return cls(level=level, format_type=format_type)


class SensitiveDataFilter(logging.Filter):
    """Filter to redact secrets and tokens from log messages."""

    def __init__(self, patterns: List[str]) -> None:
        super().__init__()
        self.compiled_patterns = [re.compile(pattern, re.IGNORECASE) for pattern in patterns]

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact sensitive data in place.

        Returns:
            bool: Always True (we modify but don't filter out records)
        """
        if isinstance(record.msg, str):
            record.msg = self._redact(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )

        return True

    def _redact(self, text: str) -> str:
        for pattern in self.compiled_patterns:
            text = pattern.sub("[REDACTED]", text)
        return text


class StructuredFormatter(logging.Formatter):
    """Formatter emitting one JSON object per log record."""

    STANDARD_ATTRS = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "message",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_data = {}
        for key, value in record.__dict__.items():
            if key not in self.STANDARD_ATTRS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    extra_data[key] = value
                except (TypeError, ValueError):
                    extra_data[key] = str(value)
        if extra_data:
            log_data["extra"] = extra_data

        return json.dumps(log_data, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Console formatter with color support."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and self._supports_color()

    def _supports_color(self) -> bool:
        return (
            hasattr(sys.stderr, "isatty")
            and sys.stderr.isatty()
            and os.environ.get("TERM") != "dumb"
        )

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            reset = self.COLORS["RESET"]
            formatted = (
                f"{color}[{timestamp}] {record.levelname:<8}{reset} - "
                f"{record.name} - {record.getMessage()}"
            )
        else:
            formatted = (
                f"[{timestamp}] {record.levelname:<8} - {record.name} - {record.getMessage()}"
            )

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"
        return formatted


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure the ``forcelogout`` logger hierarchy.

    Args:
        config: Logging configuration

    Returns:
        logging.Logger: The package root logger
    """
    config = config or LoggingConfig()
    level = getattr(logging, config.level.value)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter: logging.Formatter
    if config.format_type == LogFormat.JSON:
        formatter = StructuredFormatter()
    elif config.format_type == LogFormat.DETAILED and config.console_colors:
        formatter = ColoredConsoleFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)-8s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)

    if config.sensitive_data_patterns:
        handler.addFilter(SensitiveDataFilter(config.sensitive_data_patterns))

    root_logger = logging.getLogger("forcelogout")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False

    # SDK loggers are noisy at INFO; keep them at WARNING unless asked for.
    sdk_level = logging.DEBUG if config.log_sdk_requests else logging.WARNING
    for logger_name in ("boto3", "botocore", "urllib3", "google", "firebase_admin", "werkzeug"):
        logging.getLogger(logger_name).setLevel(sdk_level)

    return root_logger
