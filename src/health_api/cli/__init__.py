"""CLI module for the health API server.

Provides command-line interface for administrative tasks like database
management and user provisioning.
"""

from health_api.cli.app import app

__all__ = ["app"]
