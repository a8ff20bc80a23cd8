"""Compare command implementation.

Compares a serialized desired record with the live filesystem entry.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from filemeta.cli.types import OutputFormat, collect_or_exit
from filemeta.core.diff import MetadataDiff, compare_metadata
from filemeta.core.settings import Settings
from filemeta.metadata.models import SourcePermissions
from filemeta.metadata.record import FileMetadata, MetadataValidationError
from filemeta.utils.formatting import console, print_error, print_success


def _load_desired(path: Path, settings: Settings) -> FileMetadata:
    """Load a desired record from a JSON file.

    Raises:
        typer.Exit: If the file cannot be read or is not a valid record.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        print_error(f"Cannot read {path}: {e}")
        raise typer.Exit(code=1) from e
    except json.JSONDecodeError as e:
        print_error(f"Invalid JSON in {path}: {e}")
        raise typer.Exit(code=1) from e

    if not isinstance(data, dict):
        print_error(f"Expected a JSON object in {path}")
        raise typer.Exit(code=1)

    try:
        return FileMetadata.from_data_hash(
            data, default_checksum_type=settings.digest_algorithm
        )
    except MetadataValidationError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _print_diff(diff: MetadataDiff) -> None:
    """Display differences as a Rich table."""
    table = Table(title=diff.path, show_header=True, header_style="header")
    table.add_column("Attribute", no_wrap=True)
    table.add_column("Desired", style="added")
    table.add_column("Actual", style="removed")

    for d in diff.differences:
        table.add_row(d.name, _display(d.name, d.desired), _display(d.name, d.actual))

    console.print(table)


def _display(name: str, value: object) -> str:
    if value is None:
        return "-"
    if name == "mode" and isinstance(value, int):
        return f"{value:04o}"
    return str(value)


def compare(
    ctx: typer.Context,
    desired_path: Annotated[
        Path,
        typer.Argument(help="JSON file holding the desired record."),
    ],
    source_permissions: Annotated[
        SourcePermissions | None,
        typer.Option(
            "--source-permissions",
            "-p",
            help="Permission policy for the live entry (default from settings).",
            case_sensitive=False,
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Compare a desired record with the live filesystem entry.

    The live entry is collected with the desired record's checksum type.
    Exits with code 1 when the entry differs.

    Examples:
        filemeta compare desired.json
        filemeta compare -p use --format json desired.json
    """
    settings: Settings = ctx.obj["settings"]
    desired = _load_desired(desired_path, settings)

    actual = FileMetadata(
        path=desired.path,
        relative_path=desired.relative_path,
        links=desired.links,
        checksum_type=desired.checksum_type,
    )
    collect_or_exit(actual, source_permissions or settings.source_permissions)

    diff = compare_metadata(desired, actual)

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(diff.to_dict()))
    elif diff.is_in_sync:
        print_success(f"{diff.path} is in sync.")
    else:
        _print_diff(diff)

    if not diff.is_in_sync:
        raise typer.Exit(code=1)
