"""Shared utilities: configuration and logging."""

from .config import Config, LogoutSettings, ProviderConfig, ServerConfig, load_exclusion_file
from .logging_config import LoggingConfig, setup_logging

__all__ = [
    "Config",
    "LoggingConfig",
    "LogoutSettings",
    "ProviderConfig",
    "ServerConfig",
    "load_exclusion_file",
    "setup_logging",
]
