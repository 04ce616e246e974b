"""Mini README: Interactive interfaces for the back office.

Exports the FastAPI application factory that serves the task board and the
expense ledger. The launcher script at the repository root wraps it in a
Typer CLI alongside terminal helpers.
"""

from .web_app import create_application

__all__ = ["create_application"]
