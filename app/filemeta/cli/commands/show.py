"""Show command implementation.

Collects the metadata of a single filesystem entry and prints it.
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from filemeta.cli.types import (
    OutputFormat,
    absolute_path,
    collect_or_exit,
    print_record_json,
    print_record_table,
)
from filemeta.core.settings import Settings
from filemeta.metadata.models import FileType, LinkHandling, SourcePermissions
from filemeta.metadata.record import FileMetadata
from filemeta.utils.formatting import print_error, print_warning


def show(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Argument(help="File, directory or link to describe."),
    ],
    checksum_type: Annotated[
        str | None,
        typer.Option(
            "--checksum-type",
            "-c",
            help="Checksum algorithm (default from settings).",
        ),
    ] = None,
    source_permissions: Annotated[
        SourcePermissions | None,
        typer.Option(
            "--source-permissions",
            "-p",
            help="Report real owner/group/mode (use) or process defaults (ignore).",
            case_sensitive=False,
        ),
    ] = None,
    follow_links: Annotated[
        bool,
        typer.Option("--follow-links", help="Describe link targets instead of links."),
    ] = False,
    base_dir: Annotated[
        Path | None,
        typer.Option("--base-dir", "-b", help="Directory relative paths resolve against."),
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
    """Describe a file, directory or link.

    Examples:
        filemeta show /etc/hosts
        filemeta show -c md5 -p use /etc/hosts
        filemeta show --format json ./build
    """
    settings: Settings = ctx.obj["settings"]
    links = LinkHandling.FOLLOW if follow_links else settings.links

    try:
        record = FileMetadata(
            path=str(absolute_path(path, base_dir)),
            checksum_type=checksum_type or settings.digest_algorithm,
            links=links,
        )
    except ValidationError as e:
        print_error(f"Invalid options: {e}")
        raise typer.Exit(code=1) from e

    collect_or_exit(record, source_permissions or settings.source_permissions)

    if record.ftype == FileType.LINK and record.checksum is None:
        print_warning(f"Link target of {record.full_path} cannot be checksummed")

    if output_format == OutputFormat.JSON:
        print_record_json(record)
        return

    print_record_table(record)
