"""Typer application behind ``health-api-cli``."""

import typer

from health_api.cli.commands import db, users
from health_api.services.di import register_all_services
from health_api.services.registry import get_service_registry

app = typer.Typer(
    name="health-api-cli",
    help="Administrative tools for the health API: database and user accounts",
    no_args_is_help=True,
)
app.add_typer(db.app, name="db")
app.add_typer(users.app, name="users")


@app.callback()
def register_services():
    """Make the services available to every command."""
    register_all_services(get_service_registry())
