"""CLI commands for filemeta.

This package contains all subcommand implementations.
"""

from filemeta.cli.commands import compare, show

__all__ = ["compare", "show"]
