"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

import json
import os
from enum import Enum
from pathlib import Path

import typer
from rich.table import Table

from filemeta.metadata.collector import UnsupportedPermissionsError
from filemeta.metadata.models import SourcePermissions
from filemeta.metadata.platform import PlatformCapabilities
from filemeta.metadata.record import FileMetadata, UnsupportedFileTypeError
from filemeta.utils.formatting import console, print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def absolute_path(path: Path, base_dir: Path | None = None) -> Path:
    """Make a path absolute without following symbolic links.

    Args:
        path: Path given on the command line.
        base_dir: Directory relative paths resolve against (default: cwd).

    Returns:
        Normalized absolute path.
    """
    if not path.is_absolute():
        path = (base_dir or Path.cwd()) / path
    return Path(os.path.abspath(path))


def collect_or_exit(
    record: FileMetadata,
    source_permissions: SourcePermissions | None,
    platform: PlatformCapabilities | None = None,
) -> None:
    """Collect a record, printing an error and exiting on failure.

    Raises:
        typer.Exit: If the entry cannot be described.
    """
    try:
        record.collect(source_permissions, platform=platform)
    except FileNotFoundError as e:
        print_error(f"No such file or directory: {record.full_path}")
        raise typer.Exit(code=1) from e
    except PermissionError as e:
        print_error(f"Permission denied: {record.full_path}")
        raise typer.Exit(code=1) from e
    except OSError as e:
        print_error(f"Cannot describe {record.full_path}: {e.strerror or e}")
        raise typer.Exit(code=1) from e
    except (UnsupportedFileTypeError, UnsupportedPermissionsError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def print_record_json(record: FileMetadata) -> None:
    """Print a record's structured representation as JSON."""
    console.print_json(json.dumps(record.to_data_hash()))


def print_record_table(record: FileMetadata) -> None:
    """Print a record as a two-column Rich table."""
    table = Table(
        title=str(record.full_path),
        show_header=True,
        header_style="header",
    )
    table.add_column("Attribute", style="muted", no_wrap=True)
    table.add_column("Value", style="text")

    mode = f"{record.mode:04o}" if record.mode is not None else "-"
    rows = (
        ("type", record.ftype.value if record.ftype else "-"),
        ("owner", _display(record.owner)),
        ("group", _display(record.group)),
        ("mode", mode),
        ("checksum", _display(record.checksum)),
        ("destination", _display(record.destination)),
    )
    for name, value in rows:
        table.add_row(name, value)

    console.print(table)


def _display(value: object) -> str:
    return "-" if value is None else str(value)
