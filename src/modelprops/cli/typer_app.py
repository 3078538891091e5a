"""
modelprops Typer CLI Application

Inspect how a property type coerces, validates, stores and renders a
value from the command line.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from modelprops.cli.check_handler import check_command
from modelprops.cli.json_formatter import format_json_output
from modelprops.config import reload_config, setup_logging
from modelprops.containers import container
from modelprops.shared.constants import Application

# Version information
__version__ = Application.VERSION


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(f"{Application.NAME} {__version__}")
        raise typer.Exit


app = typer.Typer(
    name=Application.NAME,
    help="Typed model properties: coercion, validation and rendering.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main(
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a TOML configuration file."),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Enable logging at this level (DEBUG, INFO, WARNING, ERROR)."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version information and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Load configuration and set up logging before any command runs."""
    if config is not None:
        settings = reload_config(config)
        container.reset_singletons()
    else:
        settings = container.config()

    if log_level:
        settings.logging.level = log_level.upper()
        setup_logging(settings)


@app.command("check")
def check_command_typer(
    type_ident: Annotated[
        str,
        typer.Option("--type", "-t", help="Property type ident (see `modelprops types`)."),
    ],
    value: Annotated[
        Optional[str],
        typer.Option("--value", "-v", help="Raw value to coerce."),
    ] = None,
    option: Annotated[
        Optional[list[str]],
        typer.Option("--option", "-o", help="Property option as key=value (repeatable)."),
    ] = None,
    lang: Annotated[
        Optional[str],
        typer.Option("--lang", "-l", help="Locale used to render localized values."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Enable machine-readable JSON output."),
    ] = False,
) -> None:
    """Coerce and validate a value with a property type.

    Exits with code 1 when the value is rejected or fails validation.
    """
    check_command(
        container.property_factory(),
        type_ident,
        value,
        option,
        lang,
        json_output=json_output,
    )


@app.command("types")
def types_command_typer(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Enable machine-readable JSON output."),
    ] = False,
) -> None:
    """List the registered property types."""
    types = container.property_factory().types()
    if json_output:
        typer.echo(format_json_output(True, "types", data={"types": types}).decode("utf-8"))
        return

    console = Console()
    for type_ident in types:
        console.print(type_ident)
