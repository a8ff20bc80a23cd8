"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from filemeta import __version__
from filemeta.cli.commands import compare, show
from filemeta.core.settings import SettingsError, get_settings
from filemeta.utils.formatting import err_console, print_error

# Create main Typer app
app = typer.Typer(
    name="filemeta",
    help="Collect and compare normalized file metadata.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"filemeta version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route filemeta log records to stderr through Rich."""
    logger = logging.getLogger("filemeta")
    logger.handlers.clear()
    if verbose:
        logger.addHandler(RichHandler(console=err_console, show_path=False))
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Settings file (default: ~/.config/filemeta/settings.toml).",
        ),
    ] = None,
) -> None:
    """filemeta - Normalized file metadata for configuration management.

    Describe files, directories and links as platform-independent,
    checksum-typed records and compare them with a desired state.
    """
    _configure_logging(verbose)

    try:
        settings = get_settings(config)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["settings"] = settings


# Register commands
app.command(name="show")(show.show)
app.command(name="compare")(compare.compare)


if __name__ == "__main__":
    app()
