#!/usr/bin/env python3
"""
forcelogout - bulk forced logout for identity provider user pools.
"""
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from . import __version__
from .commands import logout, server, user
from .exceptions import ConfigurationError
from .utils.config import Config
from .utils.logging_config import LoggingConfig, LogLevel, setup_logging

app = typer.Typer(
    help="Force users of an identity provider to log out, in bulk or one at a time.",
    add_completion=True,
    no_args_is_help=True,
)
console = Console()

# Add subcommands
app.add_typer(logout.app, name="logout")
app.add_typer(user.app, name="user")
app.add_typer(server.app, name="server")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file used for logging settings"
    ),
):
    """Configure logging before any command runs."""
    try:
        logging_config = LoggingConfig.from_dict(Config(config_file).get_logging_config())
    except ConfigurationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    if verbose:
        logging_config.level = LogLevel.DEBUG
    setup_logging(logging_config)


# Add version command
@app.command()
def version():
    """Show the application version and exit."""
    console.print(f"forcelogout version: {__version__}")
    raise typer.Exit()


if __name__ == "__main__":
    app()
