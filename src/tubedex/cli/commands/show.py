"""
Show command: render a directory document as a terminal table.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tubedex.config.settings import settings
from tubedex.exceptions import (
    EXIT_CODE_GENERAL_ERROR,
    EXIT_CODE_INVALID_ARGS,
    ConfigurationError,
)
from tubedex.models.enums import SortKey
from tubedex.services.directory_view import (
    filter_channels,
    format_count,
    sort_channels,
    subscriber_cell,
)
from tubedex.services.scraping.directory import load_directory

console = Console()


def show(
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Directory document to read. Defaults to OUTPUT_FILE.",
    ),
    search: Optional[str] = typer.Option(
        None,
        "--search",
        "-s",
        help="Only show channels whose title or handle contains this text",
    ),
    sort: SortKey = typer.Option(
        SortKey.SUBS,
        "--sort",
        case_sensitive=False,
        help="Column to sort by",
    ),
    ascending: bool = typer.Option(False, "--ascending", help="Force ascending order"),
    descending: bool = typer.Option(
        False, "--descending", help="Force descending order"
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", help="Show at most this many channels"
    ),
) -> None:
    """
    Browse the channel directory.

    Examples:
        tubedex show
        tubedex show --search tech --sort views
        tubedex show --sort name --descending --limit 20
    """
    if ascending and descending:
        console.print("[red]Error: --ascending and --descending are exclusive[/red]")
        raise typer.Exit(code=EXIT_CODE_INVALID_ARGS)
    if limit is not None and limit <= 0:
        console.print("[red]Error: --limit must be a positive integer[/red]")
        raise typer.Exit(code=EXIT_CODE_INVALID_ARGS)

    path = file or settings.output_file
    try:
        directory = load_directory(path)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(code=EXIT_CODE_GENERAL_ERROR)

    order: Optional[bool] = None
    if ascending:
        order = False
    elif descending:
        order = True

    visible = sort_channels(filter_channels(directory.channels, search), sort, order)
    if limit is not None:
        visible = visible[:limit]

    table = Table(title="Channel Directory", show_lines=False)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Channel", style="cyan")
    table.add_column("Handle", style="blue")
    table.add_column("Subscribers", justify="right")
    table.add_column("Videos", justify="right")
    table.add_column("Views", justify="right")

    for position, record in enumerate(visible, start=1):
        title = escape(record.title)
        name = f"{title} [green]✓[/green]" if record.verified else title
        subs = subscriber_cell(record)
        table.add_row(
            str(position),
            name,
            escape(record.handle or ""),
            f"[yellow]{subs}[/yellow]" if record.hidden_subs else subs,
            format_count(record.videos),
            format_count(record.views),
        )

    console.print(table)
    console.print(
        f"[dim]Showing {len(visible)} of {len(directory.channels)} channel(s), "
        f"generated {directory.generated_at:%Y-%m-%d %H:%M} UTC[/dim]"
    )
