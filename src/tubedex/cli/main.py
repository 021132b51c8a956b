"""
Main CLI entry point for tubedex.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from tubedex import __version__
from tubedex.cli.commands.build import build
from tubedex.cli.commands.show import show
from tubedex.config.settings import settings

console = Console()

app = typer.Typer(
    name="tubedex",
    help="Build and browse a directory of YouTube channels",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("build", help="Scrape the channel list and write the directory")(build)
app.command("show", help="Browse the channel directory in the terminal")(show)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]tubedex[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.command()
def status() -> None:
    """Show configured paths and sources."""
    channels_state = (
        "[green]✓[/green]" if settings.channels_file.exists() else "[red]✗[/red]"
    )
    output_state = (
        "[green]✓[/green]" if settings.output_file.exists() else "[yellow]![/yellow]"
    )
    console.print(
        Panel(
            f"{channels_state} Channel list: {settings.channels_file}\n"
            f"{output_state} Directory: {settings.output_file}\n"
            f"[blue]i[/blue] Sources: {', '.join(settings.source_order)}\n"
            "[blue]i[/blue] Use 'tubedex --help' for available commands",
            title="Status",
            border_style="green",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
) -> None:
    """
    tubedex - Static directory of YouTube channels.

    Scrapes subscriber, view and upload counts for a list of channels and
    writes them to a JSON document for a static page.
    """
    if version:
        console.print(f"tubedex v{__version__}")
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use 'tubedex --help' for available commands[/yellow]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
