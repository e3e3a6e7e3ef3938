"""
Balsa Main Module.

This module is the command line entry point of the Balsa template engine.

Usage:
    List the editable variables of a template:
        $ balsa catalogue page.html
        $ balsa catalogue page.html --json

    Render with defaults, or with overrides:
        $ balsa render page.html
        $ balsa render page.html --set headerText="Welcome" --set columns=3
        $ balsa render page.html --overrides values.json --output out.html

    Check that every variable resolves from defaults:
        $ balsa check page.html

Environment:
    BALSA_BEQUIET, BALSA_DETAILEDOUTPUT, BALSA_MERGEPOLICY,
    BALSA_UNKNOWNOVERRIDES and BALSA_MAXTEMPLATEBYTES override the engine
    settings.
"""

import sys
from typing import Final, Optional, Sequence
from rich.console import Console
from balsa.commands.app import cli
from balsa.lib.log import LOG, logging_configure

console: Final[Console] = Console()


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the `balsa` command group.

    Args:
        argv: Command line arguments; defaults to `sys.argv[1:]`

    Note:
        Installs the engine log sink on stderr, then exits with the status
        the invoked command sets; Ctrl-C exits with 130
    """
    logging_configure()
    try:
        cli.main(args=list(argv) if argv is not None else None, prog_name="balsa")
    except KeyboardInterrupt:
        LOG("Interrupted by user")
        console.print("\n[bold cyan]Program interrupted by user. Exiting.[/bold cyan]")
        sys.exit(130)


if __name__ == "__main__":
    main()
