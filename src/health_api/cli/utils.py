"""CLI utility functions shared across commands."""

import typer
from rich.console import Console
from rich.table import Table

from health_api.services.health_check_service import CheckResult

console = Console()


def print_check_results(checks: list[CheckResult], context: str) -> None:
    """Render check results as a table and exit when any check failed.

    Args:
        checks: Results to display
        context: Human-readable name of what was checked, used in the failure message

    Raises:
        typer.Exit: If at least one check failed
    """
    table = Table(show_header=True, header_style="bold")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Message")
    for check in checks:
        status = "[green]OK[/green]" if check.success else "[red]FAILED[/red]"
        table.add_row(check.check, status, check.message)
    console.print(table)

    if not all(check.success for check in checks):
        console.print(f"[red]Error: {context} failed[/red]")
        raise typer.Exit(1)
