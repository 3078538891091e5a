"""Check command handler.

Builds a property through the factory, coerces a raw value, runs
validation and reports the canonical, input and display renderings
together with the SQL mapping and every validation issue.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from modelprops.cli.json_formatter import format_json_output
from modelprops.core.factory import PropertyFactory
from modelprops.core.properties import AbstractProperty
from modelprops.shared.errors import ApplicationError, ErrorCode, ErrorContext, PropertyError
from modelprops.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
)

logger = logging.getLogger(__name__)

CHECK_IDENT = "value"


def parse_option(option: str) -> tuple[str, Any]:
    """Split a ``key=value`` option; the value is decoded as JSON when possible.

    Example:
        >>> parse_option("max_length=10")
        ('max_length', 10)
        >>> parse_option("regexp=/^a/i")
        ('regexp', '/^a/i')

    Raises:
        ApplicationError: If the option has no ``=`` or an empty key
    """
    key, sep, raw = option.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ApplicationError(
            ErrorCode.CLI_INVALID_ARGUMENTS,
            f'Option must be given as key=value, received "{option}"',
            ErrorContext(operation="parse_option", additional_data={"option": option}),
        )
    try:
        value: Any = json.loads(raw)
    except ValueError:
        value = raw
    return key, value


def parse_options(options: list[str] | None) -> dict[str, Any]:
    return dict(parse_option(option) for option in options or [])


def collect_check_data(prop: AbstractProperty, lang: str | None = None) -> dict[str, Any]:
    """Render the checked property into a plain dictionary."""
    render_options = {"lang": lang} if lang else {}
    return {
        "type": prop.type(),
        "ident": prop.ident,
        "val": prop.json_serialize(),
        "input_val": prop.input_val(None, render_options),
        "display_val": prop.display_val(None, render_options),
        "sql_type": prop.sql_type(),
        "sql_pdo_type": prop.sql_pdo_type().value,
        "valid": not prop.errors(),
    }


def run_check(
    factory: PropertyFactory,
    type_ident: str,
    value: str | None,
    options: dict[str, Any],
    lang: str | None = None,
) -> tuple[dict[str, Any] | None, list[dict[str, Any]]]:
    """Build, coerce and validate.

    Returns:
        The rendered property (None when building or coercion failed)
        and the list of errors / validation issues.
    """
    log_operation_start(logger, "check", {"type": type_ident})
    try:
        prop = factory.build({"type": type_ident, **options}, ident=CHECK_IDENT)
        prop.set_val(value)
    except PropertyError as e:
        log_operation_error(logger, e, operation="check")
        return None, [e.to_dict()]

    prop.validate()
    issues = [issue.to_dict() for issue in prop.errors()]
    log_operation_success(logger, "check", {"issues": len(issues)})
    return collect_check_data(prop, lang), issues


def print_check_result(
    console: Console,
    data: dict[str, Any] | None,
    issues: list[dict[str, Any]],
) -> None:
    if data is not None:
        table = Table(title=f"{data['type']} property")
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")
        for field in ("val", "input_val", "display_val", "sql_type", "sql_pdo_type", "valid"):
            table.add_row(field, repr(data[field]) if field == "val" else str(data[field]))
        console.print(table)

    if issues:
        issue_table = Table(title="Issues")
        issue_table.add_column("Code", style="red", no_wrap=True)
        issue_table.add_column("Message")
        for issue in issues:
            issue_table.add_row(str(issue.get("code")), str(issue.get("message")))
        console.print(issue_table)


def check_command(
    factory: PropertyFactory,
    type_ident: str,
    value: str | None,
    raw_options: list[str] | None,
    lang: str | None = None,
    *,
    json_output: bool = False,
) -> None:
    """Run the check and print the result.

    Raises:
        typer.Exit: With code 1 when coercion fails or issues were found
    """
    try:
        options = parse_options(raw_options)
    except ApplicationError as e:
        data, issues = None, [e.to_dict()]
    else:
        data, issues = run_check(factory, type_ident, value, options, lang)

    if json_output:
        output = format_json_output(not issues, "check", data=data, errors=issues)
        typer.echo(output.decode("utf-8"))
    else:
        print_check_result(Console(), data, issues)

    if issues:
        raise typer.Exit(1)
