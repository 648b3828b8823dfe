"""Common command infrastructure for forcelogout CLI commands.

This module provides shared functionality for all CLI commands including:
- The shared Rich console
- Configuration loading with a --config option
- Identity service construction from configuration
"""

import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from ..bulk.batch import BatchOptions
from ..exceptions import ConfigurationError, ForceLogoutError
from ..identity import IdentityService, create_identity_service
from ..utils.config import Config, LogoutSettings

# Shared instances
console = Console()
logger = logging.getLogger(__name__)


def config_option() -> Any:
    """
    Create a standardized --config option for commands.

    Returns:
        Typer option for the configuration file path
    """
    return typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to use (defaults to ~/.forcelogout/config.yaml)",
    )


def load_config(config_file: Optional[Path] = None) -> Config:
    """Load configuration, exiting with an error message when it is invalid."""
    config = Config(config_file)
    try:
        config.get_all()
    except ConfigurationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    return config


def build_identity_service(config: Config) -> IdentityService:
    """
    Create the identity service described by the configuration.

    Args:
        config: Loaded configuration

    Returns:
        IdentityService for the configured provider

    Raises:
        typer.Exit: If the provider cannot be configured
    """
    try:
        provider_config = config.get_provider_config()
        identity = create_identity_service(provider_config)
    except ForceLogoutError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error initializing identity provider: {str(e)}[/red]")
        raise typer.Exit(1)

    logger.debug("Using %s identity provider", provider_config.type)
    return identity


def batch_options_from_settings(
    settings: LogoutSettings, concurrency: Optional[int] = None
) -> BatchOptions:
    """Build BatchOptions from configured settings, with an optional concurrency override."""
    options = BatchOptions(
        page_size=settings.page_size,
        hard_concurrency=settings.hard_concurrency,
        soft_concurrency=settings.soft_concurrency,
        max_attempts=settings.max_attempts,
        base_delay=settings.base_delay,
        soft_pacing_delay=settings.soft_pacing_delay,
    )
    if concurrency is not None:
        options.hard_concurrency = concurrency
        options.soft_concurrency = concurrency
    return options
