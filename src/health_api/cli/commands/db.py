"""Database commands: connectivity/schema check and migrations."""

import typer
from rich.console import Console
from rich.table import Table

from health_api.cli.utils import print_check_results
from health_api.database import AlembicManager
from health_api.database.advisory_lock import AdvisoryLock, advisory_lock
from health_api.services.health_check_service import HealthCheckService
from health_api.services.registry import get_service_registry

app = typer.Typer(help="Database operations")
console = Console()


def _health_service() -> HealthCheckService:
    return get_service_registry().get(HealthCheckService)


def _print_revisions(details: dict) -> None:
    table = Table(show_header=False, box=None)
    table.add_row("Database revision", str(details.get("current_revision") or "none"))
    table.add_row("Migration head", str(details.get("head_revision") or "unknown"))
    console.print(table)


@app.command()
def check():
    """Verify the database is reachable and its schema is at the migration head.

    Examples:
        health-api-cli db check
    """
    result = _health_service().perform_health_check(include_schema=True)
    print_check_results(result.checks, "database check")
    console.print("[green]Database reachable, schema up to date[/green]")


@app.command()
def upgrade(
    yes: bool = typer.Option(False, "--yes", "-y", help="Apply pending migrations without asking"),
):
    """Apply pending migrations (users, professionals, events, notifications, reports).

    Concurrent upgrades from several instances are serialized by the migration
    advisory lock on PostgreSQL.

    Examples:
        health-api-cli db upgrade --yes
    """
    health_service = _health_service()
    print_check_results([health_service.check_database_connection()], "database connection check")

    manager = AlembicManager()
    message, details, up_to_date = manager.validate_schema_state()
    _print_revisions(details)
    if up_to_date:
        console.print("[green]Nothing to migrate[/green]")
        return

    console.print(f"[yellow]{message}[/yellow]")
    if not yes and not typer.confirm("Apply pending migrations now?"):
        console.print("Aborted, schema left unchanged")
        raise typer.Exit(0)

    try:
        with advisory_lock(AdvisoryLock.MIGRATION):
            migrated = manager.perform_migration()
    except (OSError, ValueError, RuntimeError) as e:
        console.print(f"[red]Migration failed: {e}[/red]")
        raise typer.Exit(1) from None
    if not migrated:
        console.print("[red]Migration failed, see the log for details[/red]")
        raise typer.Exit(1)

    print_check_results([health_service.check_database_schema()], "schema validation after migration")
    console.print("[green]Schema migrated to head[/green]")
