"""CLI package for Rulekeeper.

This package provides the command-line interface using Typer.
The CLI is a thin wrapper around the commands layer.
"""

from rulekeeper.cli.app import app, console

__all__ = ["app", "console"]
