"""Bulk logout commands for forcelogout.

This module provides the command that logs out every user in the identity
provider's user pool, except the configured exclusions.

Commands:
    all: Log out every non-excluded user

Modes:
    Default: Revoke refresh tokens. Users keep working until their current
        ID token expires (up to one hour).
    --immediate: Disable, revoke and re-enable every account. Issued tokens
        stop working at once, but each user costs three provider calls.

Examples:
    # Revoke refresh tokens for everyone except two administrators
    $ forcelogout logout all --exclude admin-uid-1 --exclude admin-uid-2

    # Immediate logout, exclusions read from a file, no confirmation prompt
    $ forcelogout logout all --immediate --exclude-file keep.txt --yes
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from ..bulk.batch import run_batch_logout
from ..bulk.reporting import ReportGenerator
from ..bulk.results import LogoutMode
from ..exceptions import ConfigurationError, FatalPagingError
from .common import (
    batch_options_from_settings,
    build_identity_service,
    config_option,
    console,
    load_config,
)

app = typer.Typer(
    help="""Log out users from the identity provider in bulk.

By default refresh tokens are revoked. With --immediate every account is
disabled, revoked and re-enabled so that issued tokens stop working at once.

Examples:
  forcelogout logout all --exclude admin-uid
  forcelogout logout all --immediate --exclude-file keep.txt --yes
"""
)


@app.command("all")
def logout_all(
    immediate: bool = typer.Option(
        False,
        "--immediate",
        help="Disable, revoke and re-enable each account so issued tokens stop working at once",
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-e", help="User ID to leave logged in (repeatable)"
    ),
    exclude_file: Optional[List[Path]] = typer.Option(
        None,
        "--exclude-file",
        help="File of user IDs to leave logged in (YAML, JSON or one ID per line)",
    ),
    errors_file: Optional[Path] = typer.Option(
        None, "--errors-file", help="Where to write failed users (default: logout.errors_file)"
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", help="Override the number of users processed at once"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    config_file: Optional[Path] = config_option(),
):
    """Log out every user except the excluded ones.

    Per-user failures are reported and written to the errors file; they do
    not change the exit code. The command exits with 1 only when the run
    could not be completed.
    """
    if concurrency is not None and concurrency < 1:
        console.print("[red]Error: Concurrency must be a positive integer.[/red]")
        raise typer.Exit(1)

    config = load_config(config_file)
    try:
        settings = config.get_logout_settings()
        excluded_ids = config.get_excluded_user_ids(
            extra_ids=exclude or [], extra_files=exclude_file or []
        )
    except ConfigurationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    options = batch_options_from_settings(settings, concurrency)
    mode = LogoutMode.HARD if immediate else LogoutMode.SOFT
    errors_path = errors_file or Path(settings.errors_file)

    if immediate:
        console.print("[bold yellow]IMMEDIATE LOGOUT MODE[/bold yellow]")
        console.print(
            "[yellow]Every account will be briefly disabled. "
            "Users are signed out of all devices at once.[/yellow]"
        )
    else:
        console.print("[blue]Standard logout: refresh tokens will be revoked.[/blue]")
        console.print("[dim]Users stay signed in until their current ID token expires.[/dim]")
    console.print(f"[dim]Excluded users: {len(excluded_ids)}[/dim]")
    console.print(f"[dim]Concurrency: {options.concurrency_for(mode)}[/dim]")
    console.print()

    if not yes and not typer.confirm("Log out all users now?"):
        console.print("[yellow]Logout cancelled.[/yellow]")
        raise typer.Exit(0)

    identity = build_identity_service(config)
    report_generator = ReportGenerator(console)

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("({task.completed}/{task.total})"),
        TimeElapsedColumn(),
        console=console,
    )

    try:
        with progress:
            task_id = progress.add_task("Logging out users", total=None)

            def on_progress(completed: int, seen: int) -> None:
                progress.update(task_id, completed=completed, total=seen)

            report = asyncio.run(
                run_batch_logout(
                    identity,
                    excluded_ids=excluded_ids,
                    hard_mode=immediate,
                    options=options,
                    progress_callback=on_progress,
                )
            )
    except FatalPagingError as e:
        console.print(f"\n[red]✗ Logout run aborted: {e.message}[/red]")
        if e.partial_report is not None:
            report_generator.generate_summary_report(e.partial_report)
            report_generator.generate_error_summary(e.partial_report)
            report_generator.save_errors(e.partial_report, errors_path)
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"\n[red]Unexpected error during logout run: {str(e)}[/red]")
        raise typer.Exit(1)

    report_generator.generate_summary_report(report)
    report_generator.generate_error_summary(report)
    report_generator.save_errors(report, errors_path)

    if report.accounts_left_disabled:
        console.print(
            f"\n[bold red]{len(report.accounts_left_disabled)} accounts are still disabled "
            "and must be re-enabled manually.[/bold red]"
        )
    elif report.failed_count:
        console.print(
            f"\n[yellow]Logout completed with {report.failed_count} failures.[/yellow]"
        )
    else:
        console.print("\n[green]Logout completed successfully![/green]")
