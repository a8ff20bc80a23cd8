"""CLI package for filemeta.

This package contains the Typer application and all subcommands.
"""

from filemeta.cli.main import app

__all__ = ["app"]
