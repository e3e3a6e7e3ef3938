"""
Defines the main Click command group for the Balsa application.

This module provides:
- The root `cli` command group for the application.
- Integration with Rich-enhanced Click classes (`RichGroup`).
- Registration of the template subcommands.

Usage:
Import `cli` to initialize and run the command-line interface.
"""

import click
from balsa import __version__
from balsa.commands.base import RichGroup
from balsa.commands.template import catalogue, check, render
from balsa.config.settings import appsettings


@click.group(
    cls=RichGroup,
    help="""
    Balsa Template Engine

    Inspect, check and render templates with typed, editable placeholders.
    """,
)
@click.version_option(__version__, "-V", "--version", prog_name="balsa")
@click.option("--quiet", "-q", is_flag=True, help="Suppress pipeline logging.")
@click.option(
    "--detailed", is_flag=True, help="Show offsets and error locations in output."
)
def cli(quiet: bool, detailed: bool) -> None:
    """
    The root Click command group for Balsa.
    """
    if quiet:
        appsettings.beQuiet = True
    if detailed:
        appsettings.detailedOutput = True


# Register subcommands
cli.add_command(catalogue)
cli.add_command(render)
cli.add_command(check)
