"""
Rich-enhanced Click commands and groups for the balsa CLI.

- `rich_help`: colorized help block (description, usage, arguments).
- `RichGroup`: group help with usage, description, a command grid and options.
- `RichCommand`: command help in a Rich panel followed by its options.
"""

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from balsa.lib.log import LOG

console: Console = Console()


def rich_help(command: str, description: str, usage: str, args: dict) -> str:
    """
    Build Rich markup help text for a command.

    :param command: The command name.
    :param description: One-paragraph description.
    :param usage: Usage syntax for the command.
    :param args: Arguments/options mapped to their descriptions.
    :return: Rich markup string, used as the Click `help` text.
    """
    lines: list[str] = [
        f"[bold cyan]{command}[/bold cyan]: {description}",
        "",
        "[bold yellow]Usage:[/bold yellow]",
        f"    [green]{escape(usage)}[/green]",
    ]
    if args:
        lines += ["", "[bold yellow]Arguments:[/bold yellow]"]
        lines += [f"    [green]{escape(arg)}[/green]: {desc}" for arg, desc in args.items()]
    return "\n".join(lines) + "\n"


def options_grid(ctx: click.Context, command: click.Command) -> Table:
    """Two-column grid of a command's options and their help."""
    grid: Table = Table.grid(padding=(0, 2))
    grid.add_column(style="cyan", no_wrap=True)
    grid.add_column()
    for param in command.get_params(ctx):
        if isinstance(param, click.Option):
            grid.add_row(escape(", ".join(param.opts + param.secondary_opts)), param.help or "")
    return grid


class RichGroup(click.Group):
    """Click group whose `--help` is rendered with Rich."""

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        try:
            console.print(
                f"[bold yellow]Usage:[/bold yellow] [cyan]{ctx.command_path}[/cyan] "
                "[magenta]\\[OPTIONS] COMMAND \\[ARGS]...[/magenta]\n"
            )
            if self.help:
                console.print(f"[bold cyan]{self.help.strip()}[/bold cyan]\n")

            commands: Table = Table.grid(padding=(0, 2))
            commands.add_column(style="cyan", no_wrap=True)
            commands.add_column()
            for name in self.list_commands(ctx):
                sub: click.Command | None = self.get_command(ctx, name)
                if sub is not None and not sub.hidden:
                    commands.add_row(name, sub.get_short_help_str(limit=70))
            if commands.row_count:
                console.print("[bold green]Commands:[/bold green]")
                console.print(commands)
                console.print()

            console.print("[bold yellow]Options:[/bold yellow]")
            console.print(options_grid(ctx, self))
        except Exception as e:
            LOG(f"Falling back to plain help for {ctx.command_path}: {e}")
            super().format_help(ctx, formatter)


class RichCommand(click.Command):
    """Click command whose `--help` is a Rich panel plus its options."""

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        try:
            body: str = (self.help or "No help text available.").rstrip()
            console.print(Panel(body, expand=False, border_style="cyan"))
            console.print(options_grid(ctx, self))
        except Exception as e:
            LOG(f"Falling back to plain help for {ctx.command_path}: {e}")
            super().format_help(ctx, formatter)
