"""
Template Commands

This module provides CLI commands that run the Balsa pipeline on template
files.

Commands:
- catalogue <template> [--json]: List the editable variables.
- render <template> [--set name=value ...] [--overrides file.json] [--output file]:
  Render the template.
- check <template>: Parse, catalogue and resolve with defaults only.
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional
import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from balsa.commands.base import RichCommand, rich_help
from balsa.config.settings import appsettings
from balsa.lib.errors import BalsaError, UnresolvedVariableError
from balsa.lib.log import LOG
from balsa.lib.scanner import offset_locate
from balsa.lib.template import Template
from balsa.lib.typecheck import override_fromText
from balsa.models.dataModel import VariableEntry, VarType

console: Console = Console()


def error_report(error: Exception, template_path: Optional[str] = None) -> None:
    """
    Print an error in red. With `detailedOutput`, errors that carry a source
    offset are also located by line and column.

    :param error: The exception to report.
    :param template_path: Template file the error refers to, if any.
    """
    LOG(f"{type(error).__name__}: {error}")
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")

    offset: Optional[int] = getattr(error, "offset", None)
    if not appsettings.detailedOutput or offset is None or template_path is None:
        return
    try:
        source: str = Path(template_path).read_text(encoding="utf-8")
    except (OSError, ValueError) as e:
        LOG(f"Could not reread {template_path} for location: {e}")
        return
    line, column = offset_locate(source, offset)
    console.print(f"[yellow]  at line {line}, column {column}[/yellow]")


def assignments_parse(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    """Click callback turning repeated `name=value` options into a dict."""
    assignments: dict[str, str] = {}
    for item in values:
        name, sep, text = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected name=value, got '{item}'")
        assignments[name.strip()] = text
    return assignments


def overrides_load(path: str) -> dict[str, Any]:
    """
    Read overrides from a JSON object file.

    :param path: Path to the JSON file.
    :return: name → value mapping.
    :raises ValueError: If the file is not valid JSON or not an object.
    """
    data: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Overrides file {path} must contain a JSON object")
    return data


def overrides_build(
    entries: list[VariableEntry], assignments: dict[str, str], base: dict[str, Any]
) -> dict[str, Any]:
    """
    Merge `--set` assignments over file overrides. Each assignment is read in
    the declared type's literal syntax; names the template does not declare
    are passed through as text so the registry applies its unknown-override
    policy.
    """
    types: dict[str, VarType] = {entry.name: entry.type for entry in entries}
    overrides: dict[str, Any] = dict(base)
    for name, text in assignments.items():
        if name in types:
            overrides[name] = override_fromText(name, text, types[name])
        else:
            overrides[name] = text
    return overrides


def catalogue_table(entries: list[VariableEntry]) -> Table:
    """Rich table of a catalogue."""
    table: Table = Table(title="Template variables", header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column("Type", style="magenta")
    table.add_column("Friendly name")
    table.add_column("Default", style="yellow")
    if appsettings.detailedOutput:
        table.add_column("Offset", justify="right")

    for entry in entries:
        default: Any = entry.default
        row: list[str] = [
            entry.name,
            entry.type.value,
            escape(entry.friendlyName or ""),
            "" if default is None else escape(json.dumps(default)),
        ]
        if appsettings.detailedOutput:
            row.append(str(entry.offset))
        table.add_row(*row)
    return table


@click.command(
    cls=RichCommand,
    short_help="List the editable variables of a template",
    help=rich_help(
        command="catalogue",
        description="List every editable variable of a template with its type, "
        "friendly name and default.",
        usage="balsa catalogue <template> [--json]",
        args={
            "<template>": "Template file to inspect.",
            "--json": "Print the catalogue as a JSON array.",
        },
    ),
)
@click.argument("template_path", metavar="TEMPLATE", type=click.Path(dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the catalogue as JSON.")
def catalogue(template_path: str, as_json: bool) -> None:
    """
    Print the variable catalogue of a template.

    :param template_path: Template file.
    :param as_json: Emit JSON instead of a table.
    """
    try:
        template: Template = Template.from_file(template_path)
        entries: list[VariableEntry] = template.variables
    except (BalsaError, OSError, ValueError) as e:
        error_report(e, template_path)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([entry.record() for entry in entries], indent=2))
        return
    if not entries:
        console.print("[cyan]No editable variables.[/cyan]")
        return
    console.print(catalogue_table(entries))


@click.command(
    cls=RichCommand,
    short_help="Render a template",
    help=rich_help(
        command="render",
        description="Render a template, replacing defaults with the given overrides.",
        usage="balsa render <template> [--set name=value ...] "
        "[--overrides file.json] [--output file]",
        args={
            "<template>": "Template file to render.",
            "--set": "Override one variable; repeatable. The value is read in "
            "the variable's type (42, true, #ff0000, text).",
            "--overrides": "JSON object of overrides; --set wins over it.",
            "--output": "Write the result to a file instead of stdout.",
        },
    ),
)
@click.argument("template_path", metavar="TEMPLATE", type=click.Path(dir_okay=False))
@click.option(
    "--set",
    "assignments",
    multiple=True,
    callback=assignments_parse,
    metavar="NAME=VALUE",
    help="Override a variable.",
)
@click.option(
    "--overrides",
    "overrides_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON file of overrides.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Output file.",
)
def render(
    template_path: str,
    assignments: dict[str, str],
    overrides_path: Optional[str],
    output_path: Optional[str],
) -> None:
    """
    Render a template to stdout or a file.

    :param template_path: Template file.
    :param assignments: Overrides from `--set`.
    :param overrides_path: JSON overrides file.
    :param output_path: Destination file, or None for stdout.
    """
    try:
        template: Template = Template.from_file(template_path)
        base: dict[str, Any] = overrides_load(overrides_path) if overrides_path else {}
        overrides: dict[str, Any] = overrides_build(template.variables, assignments, base)
        text: str = template.render(overrides)
    except (BalsaError, OSError, ValueError) as e:
        error_report(e, template_path)
        sys.exit(1)

    if output_path is None:
        click.echo(text, nl=False)
        return
    try:
        Path(output_path).write_text(text, encoding="utf-8")
    except OSError as e:
        error_report(e)
        sys.exit(1)
    console.print(
        f"[bold green]Rendered {len(text)} characters to {escape(output_path)}[/bold green]"
    )


@click.command(
    cls=RichCommand,
    short_help="Check that a template renders with its defaults",
    help=rich_help(
        command="check",
        description="Parse a template, build its catalogue and resolve every "
        "variable from defaults alone.",
        usage="balsa check <template>",
        args={"<template>": "Template file to check."},
    ),
)
@click.argument("template_path", metavar="TEMPLATE", type=click.Path(dir_okay=False))
def check(template_path: str) -> None:
    """
    Validate a template. Variables without a default are reported all at
    once, since each of them needs an override at render time.

    :param template_path: Template file.
    """
    try:
        template: Template = Template.from_file(template_path)
        entries: list[VariableEntry] = template.variables
        template.resolve()
    except UnresolvedVariableError as e:
        missing: list[str] = [
            entry.name for entry in template.variables if entry.defaultExpr is None
        ]
        LOG(f"Unresolved variables: {missing}")
        console.print(
            f"[bold red]Error:[/bold red] {len(missing) or 1} variable(s) need an override: "
            f"{escape(', '.join(missing) or e.name)}"
        )
        sys.exit(1)
    except (BalsaError, OSError, ValueError) as e:
        error_report(e, template_path)
        sys.exit(1)

    console.print(
        f"[bold green]OK:[/bold green] {escape(template_path)} "
        f"({len(entries)} variable(s), all resolvable from defaults)"
    )
