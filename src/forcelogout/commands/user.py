"""Single-user commands for forcelogout.

These commands inspect one account or log it out on its own, for example to
check credentials and provider permissions before a bulk run.

Commands:
    show: Display one user's account state
    revoke: Revoke one user's refresh tokens and verify the revocation
    immediate: Disable, revoke and re-enable one user and verify the account is enabled
"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..bulk.results import LogoutMode, OutcomeStatus
from ..bulk.retry import RetryHandler
from ..bulk.terminator import SessionTerminator
from ..exceptions import ConfigurationError, ForceLogoutError, UserNotFoundError
from ..identity.base import IdentityService, UserIdentity
from .common import build_identity_service, config_option, console, load_config

app = typer.Typer(help="Inspect or log out a single user.")

# Maximum distance between the revoke call and the provider's recorded revocation time.
REVOCATION_TOLERANCE_SECONDS = 5


def _format_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def _display_user(user: UserIdentity, title: str = "User Details") -> None:
    table = Table(title=title, show_header=False)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")

    table.add_row("User ID", user.id)
    table.add_row("Email", user.email or "N/A")
    table.add_row("Display Name", user.display_name or "N/A")
    table.add_row("Disabled", "[red]Yes[/red]" if user.disabled else "[green]No[/green]")
    table.add_row("Last Sign-In", _format_datetime(user.last_sign_in))
    table.add_row("Tokens Valid After", _format_datetime(user.tokens_valid_after))

    console.print(table)


def _fetch_user(identity: IdentityService, user_id: str) -> UserIdentity:
    try:
        return asyncio.run(identity.get_user(user_id))
    except UserNotFoundError:
        console.print(f"[red]Error: User '{user_id}' not found.[/red]")
        raise typer.Exit(1)
    except ForceLogoutError as e:
        console.print(f"[red]Error fetching user '{user_id}': {e.message}[/red]")
        raise typer.Exit(1)


@app.command("show")
def show_user(
    user_id: str = typer.Argument(..., help="User ID to display"),
    config_file: Optional[Path] = config_option(),
):
    """Display a user's account state."""
    config = load_config(config_file)
    identity = build_identity_service(config)

    user = _fetch_user(identity, user_id)
    _display_user(user)


@app.command("revoke")
def revoke_user(
    user_id: str = typer.Argument(..., help="User ID to log out"),
    config_file: Optional[Path] = config_option(),
):
    """Revoke a user's refresh tokens and verify the revocation was recorded."""
    config = load_config(config_file)
    identity = build_identity_service(config)

    before = _fetch_user(identity, user_id)
    _display_user(before, title="Before")

    revoked_at = datetime.now(timezone.utc)
    try:
        asyncio.run(identity.revoke_sessions(user_id))
    except ForceLogoutError as e:
        console.print(f"[red]✗ Failed to revoke tokens for '{user_id}': {e.message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ Refresh tokens revoked for '{user_id}'[/green]")

    after = _fetch_user(identity, user_id)
    _display_user(after, title="After")

    if after.tokens_valid_after is None:
        console.print(
            "[yellow]The identity provider does not report a token revocation time; "
            "revocation could not be verified.[/yellow]"
        )
        return

    drift = abs((after.tokens_valid_after - revoked_at).total_seconds())
    if drift > REVOCATION_TOLERANCE_SECONDS:
        console.print(
            f"[red]✗ Verification failed: tokens valid after "
            f"{_format_datetime(after.tokens_valid_after)}, expected close to "
            f"{_format_datetime(revoked_at)}[/red]"
        )
        raise typer.Exit(1)

    console.print("[green]✓ Revocation verified[/green]")


@app.command("immediate")
def immediate_user(
    user_id: str = typer.Argument(..., help="User ID to log out"),
    config_file: Optional[Path] = config_option(),
):
    """Disable, revoke and re-enable a user, then verify the account is enabled."""
    config = load_config(config_file)
    try:
        settings = config.get_logout_settings()
    except ConfigurationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    identity = build_identity_service(config)

    user = _fetch_user(identity, user_id)
    _display_user(user, title="Before")

    terminator = SessionTerminator(
        identity,
        LogoutMode.HARD,
        retry_handler=RetryHandler(
            max_attempts=settings.max_attempts, base_delay=settings.base_delay
        ),
    )
    with console.status(f"[blue]Logging out '{user_id}'...[/blue]"):
        outcome = asyncio.run(terminator.terminate(user))

    if outcome.status != OutcomeStatus.SUCCESS:
        if outcome.account_left_disabled:
            console.print(
                f"[bold red]✗ {outcome.error_message}. "
                "Re-enable the account manually.[/bold red]"
            )
        else:
            console.print(f"[red]✗ Immediate logout failed: {outcome.error_message}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]✓ '{user_id}' logged out in {outcome.processing_time:.2f}s[/green]"
    )

    after = _fetch_user(identity, user_id)
    _display_user(after, title="After")

    if after.disabled:
        console.print(
            f"[bold red]✗ Verification failed: '{user_id}' is still disabled.[/bold red]"
        )
        raise typer.Exit(1)

    console.print("[green]✓ Account is enabled[/green]")
