"""Reporting components for bulk logout runs.

This module renders RunReport summaries with Rich and persists the per-user
error list, which is the only durable record of failed and left-disabled
accounts.

Classes:
    ReportGenerator: Generates formatted reports for bulk logout results
"""

import json
import time
from pathlib import Path
from typing import Optional

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .results import LogoutMode, RunReport


class ReportGenerator:
    """Generates summary and error reports for bulk logout runs."""

    def __init__(self, console: Console):
        """Initialize report generator.

        Args:
            console: Rich console for output
        """
        self.console = console

    def generate_summary_report(self, report: RunReport):
        """Generate and display summary report.

        Args:
            report: Final report of the run
        """
        summary_table = Table(show_header=False, box=None, padding=(0, 1))
        summary_table.add_column("Metric", style="bold cyan")
        summary_table.add_column("Value", style="bold")

        if report.mode == LogoutMode.HARD:
            mode = "Immediate (disable/revoke/re-enable)"
        else:
            mode = "Revoke tokens only"
        summary_table.add_row("Mode", mode)
        summary_table.add_row("Concurrency", str(report.concurrency))
        summary_table.add_row("Pages Fetched", str(report.pages_fetched))
        summary_table.add_row("Total Processed", str(report.total_processed))
        summary_table.add_row("Logged Out", f"[green]{report.success_count}[/green]")
        summary_table.add_row("Failed", f"[red]{report.failed_count}[/red]")
        summary_table.add_row("Skipped (excluded)", f"[yellow]{report.skipped_count}[/yellow]")
        summary_table.add_row("Success Rate", f"{report.success_rate:.1f}%")
        summary_table.add_row("Duration", self._format_duration(report.duration))

        status_panels = []
        if report.success_count > 0:
            status_panels.append(
                Panel(
                    f"[bold green]{report.success_count}[/bold green]\nLogged out",
                    style="green",
                    width=15,
                )
            )
        if report.failed_count > 0:
            status_panels.append(
                Panel(f"[bold red]{report.failed_count}[/bold red]\nFailed", style="red", width=15)
            )
        if report.skipped_count > 0:
            status_panels.append(
                Panel(
                    f"[bold yellow]{report.skipped_count}[/bold yellow]\nSkipped",
                    style="yellow",
                    width=15,
                )
            )

        self.console.print()
        self.console.print(
            Panel(summary_table, title="[bold]Logout Process Summary[/bold]", border_style="blue")
        )

        if status_panels:
            self.console.print()
            self.console.print(Columns(status_panels, equal=True, expand=True))

        if report.start_time and report.end_time:
            start_time_str = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(report.start_time))
            end_time_str = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(report.end_time))
            self.console.print(f"[dim]Started {start_time_str}, completed {end_time_str}[/dim]")

    def generate_error_summary(self, report: RunReport, max_rows: int = 50):
        """Display failed users, with accounts left disabled listed first.

        Args:
            report: Final report of the run
            max_rows: Maximum number of ordinary failures to list
        """
        if not report.errors:
            self.console.print("[green]No errors encountered![/green]")
            return

        left_disabled = report.accounts_left_disabled
        if left_disabled:
            disabled_table = Table(
                title="[bold red]Accounts Left Disabled - Manual Re-enable Required[/bold red]",
                show_header=True,
                header_style="bold red",
                border_style="red",
            )
            disabled_table.add_column("User ID", style="bold")
            disabled_table.add_column("Email")
            disabled_table.add_column("Error", style="red")
            for entry in left_disabled:
                disabled_table.add_row(entry.uid, entry.email or "N/A", entry.error)

            self.console.print()
            self.console.print(disabled_table)

        others = [entry for entry in report.errors if not entry.account_left_disabled]
        if not others:
            return

        error_table = Table(title="Failed Users", show_header=True, header_style="bold red")
        error_table.add_column("User ID", style="cyan")
        error_table.add_column("Email")
        error_table.add_column("Error", style="red")
        for entry in others[:max_rows]:
            error_table.add_row(entry.uid, entry.email or "N/A", entry.error)
        if len(others) > max_rows:
            error_table.add_row("...", "", f"and {len(others) - max_rows} more")

        self.console.print()
        self.console.print(error_table)

    def save_errors(self, report: RunReport, output_file: Path) -> Optional[Path]:
        """Write the error list to a JSON file.

        Args:
            report: Final report of the run
            output_file: Destination path

        Returns:
            The path written, or None when there was nothing to write
        """
        if not report.errors:
            return None

        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump([entry.to_dict() for entry in report.errors], f, indent=2)

        self.console.print(f"[yellow]Detailed errors saved to: {output_file}[/yellow]")
        return output_file

    def _format_duration(self, seconds: float) -> str:
        """Format duration in seconds to human-readable string."""
        if seconds < 0:
            return "N/A"

        if seconds < 1:
            return f"{seconds*1000:.0f}ms"
        elif seconds < 60:
            return f"{seconds:.2f}s"
        elif seconds < 3600:
            minutes = int(seconds // 60)
            remaining_seconds = seconds % 60
            return f"{minutes}m {remaining_seconds:.1f}s"
        else:
            hours = int(seconds // 3600)
            remaining_minutes = int((seconds % 3600) // 60)
            remaining_seconds = seconds % 60
            return f"{hours}h {remaining_minutes}m {remaining_seconds:.1f}s"
