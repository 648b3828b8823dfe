"""HTTP server command for forcelogout."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import ConfigurationError
from ..server import create_app
from .common import (
    batch_options_from_settings,
    build_identity_service,
    config_option,
    console,
    load_config,
)

app = typer.Typer(help="Run the HTTP endpoint that triggers a bulk logout.")


@app.command("start")
def start_server(
    host: Optional[str] = typer.Option(
        None, "--host", help="Interface to bind (default: server.host)"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", help="Port to listen on (default: server.port)"
    ),
    config_file: Optional[Path] = config_option(),
):
    """Start the logout HTTP server.

    POST /force-logout is rejected with 403 unless server.logout_enabled (or
    LOGOUT_ENABLED) is true, and with 401 unless the request carries the API
    secret in the ``key`` query parameter or the X-API-Key header.
    """
    config = load_config(config_file)
    try:
        server_config = config.get_server_config()
        settings = config.get_logout_settings()
        excluded_ids = config.get_excluded_user_ids()
    except ConfigurationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    if server_config.logout_enabled and not server_config.api_secret:
        console.print(
            "[yellow]Warning: no API secret is configured; every logout request "
            "will be rejected.[/yellow]"
        )
    if not server_config.logout_enabled:
        console.print("[yellow]Logout is disabled; POST /force-logout will answer 403.[/yellow]")

    # Bad provider configuration fails here, before any request is accepted.
    identity = build_identity_service(config)

    flask_app = create_app(
        server_config,
        identity_factory=lambda: identity,
        excluded_ids=excluded_ids,
        options=batch_options_from_settings(settings),
    )

    bind_host = host or server_config.host
    bind_port = port or server_config.port
    console.print(f"[blue]Serving on http://{bind_host}:{bind_port}[/blue]")
    flask_app.run(host=bind_host, port=bind_port)
