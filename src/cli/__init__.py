"""CLI application setup using Typer.

Provides the command-line interface for Specflow operations.
"""

from src.cli.main import app

__all__ = ["app"]
