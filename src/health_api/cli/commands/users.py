"""User management commands."""

import typer
from rich.console import Console

from health_api.database import borrow_db_session
from health_api.exceptions import HealthApiError
from health_api.models.base_model import UserRole
from health_api.services.auth_service import AuthService
from health_api.services.registry import get_service_registry

app = typer.Typer(help="User operations")
console = Console()


@app.command()
def create(
    email: str = typer.Argument(..., help="E-mail the user signs in with"),
    name: str = typer.Option(None, "--name", "-n", help="Display name"),
    role: UserRole = typer.Option(UserRole.RECEPTOR, "--role", "-r", case_sensitive=False, help="User role"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"),
):
    """Create a user that can sign in.

    Examples:
        health-api-cli users create ana@omnisaude.com.br --name "Ana" --role RECEPTOR
    """
    auth_service = get_service_registry().get(AuthService)
    try:
        with borrow_db_session() as session:
            user = auth_service.create_user(session, email, password, name=name, role=role)
    except (HealthApiError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    console.print(f"[green]User created:[/green] {user.email} ({user.role.value}) [dim]{user.id}[/dim]")
