"""
Build command: scrape every listed channel and write the directory document.

Reads the channel list, looks each channel up across the configured sources
with pacing between channels, and fully replaces the output document. Logs
go to a timestamped file under the configured logs directory.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from tubedex.config.settings import Settings, settings
from tubedex.exceptions import (
    EXIT_CODE_GENERAL_ERROR,
    EXIT_CODE_INTERRUPTED,
    EXIT_CODE_INVALID_ARGS,
    ConfigurationError,
    OutputWriteError,
)
from tubedex.models.channel import ChannelDirectory, ChannelRecord
from tubedex.services.scraping.directory import (
    build_directory,
    load_channel_references,
    write_directory,
)
from tubedex.services.scraping.http import PageFetcher
from tubedex.services.scraping.sources import SourceDescriptor, build_sources

console = Console()

LOGGER_NAME = "tubedex"

_build_handlers: list[logging.Handler] = []


def _generate_timestamp() -> str:
    """Timestamp in YYYYMMDD-HHMMSS format for log file names."""
    return datetime.now().strftime("%Y%m%d-%H%M%S")


def _setup_build_logging(
    log_dir: Path, timestamp: Optional[str] = None, verbose: bool = False
) -> Path:
    """
    Set up file logging for a build run.

    Creates ``<log_dir>/build-<timestamp>.log``. With ``verbose`` the file
    records DEBUG output and a DEBUG console handler is added as well.

    Parameters
    ----------
    log_dir : Path
        Directory for log files; created if missing.
    timestamp : str, optional
        Timestamp used in the file name. Generated if None.
    verbose : bool, optional
        Enable DEBUG logging (default False).

    Returns
    -------
    Path
        Path to the created log file.
    """
    if timestamp is None:
        timestamp = _generate_timestamp()

    _teardown_build_logging()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"build-{timestamp}.log"

    log_level = logging.DEBUG if verbose else getattr(logging, settings.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.addHandler(file_handler)
    app_logger.setLevel(log_level)
    _build_handlers.append(file_handler)

    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        app_logger.addHandler(console_handler)
        _build_handlers.append(console_handler)

    return log_file


def _teardown_build_logging() -> None:
    """Detach and close the handlers added by _setup_build_logging."""
    app_logger = logging.getLogger(LOGGER_NAME)
    while _build_handlers:
        handler = _build_handlers.pop()
        app_logger.removeHandler(handler)
        handler.close()


def _parse_source_names(value: Optional[str]) -> Optional[list[str]]:
    """Split a comma-separated ``--sources`` value; None keeps the setting."""
    if value is None:
        return None
    return [name.strip() for name in value.split(",") if name.strip()]


async def _build_async(
    references: Sequence[str],
    sources: Sequence[SourceDescriptor],
    app_settings: Settings,
) -> ChannelDirectory:
    fetcher = PageFetcher.from_settings(app_settings)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Channels", total=None)

        def on_record(index: int, total: int, record: ChannelRecord) -> None:
            progress.update(
                task,
                total=total,
                completed=index,
                description=f"Channels ({record.title})",
            )

        return await build_directory(
            references, fetcher, sources, app_settings, progress=on_record
        )


def _display_summary(directory: ChannelDirectory, output_path: Path) -> None:
    """Print counts of complete and incomplete records."""
    channels = directory.channels

    table = Table(title="Build Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Channels", style="bold", justify="right")

    table.add_row("Total", str(len(channels)))
    table.add_row(
        "Subscribers found", str(sum(1 for c in channels if c.subs is not None))
    )
    table.add_row("Subscribers hidden", str(sum(1 for c in channels if c.hidden_subs)))
    table.add_row("Views missing", str(sum(1 for c in channels if c.views is None)))
    table.add_row("Videos missing", str(sum(1 for c in channels if c.videos is None)))

    console.print()
    console.print(table)
    console.print(f"\n[green]Wrote {len(channels)} channel(s) to:[/green] {output_path}")


def build(
    channels: Optional[Path] = typer.Option(
        None,
        "--channels",
        "-c",
        help="Channel list (JSON array of strings). Defaults to CHANNELS_FILE.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory document to write. Defaults to OUTPUT_FILE.",
    ),
    sources: Optional[str] = typer.Option(
        None,
        "--sources",
        help="Comma-separated source order, e.g. 'youtube_about,socialblade'.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging (DEBUG level) to console and log file",
    ),
) -> None:
    """
    Scrape every channel in the channel list and write the directory.

    Examples:
        tubedex build
        tubedex build --channels my-channels.json --output site/data.json
        tubedex build --sources youtube_about,socialblade
        tubedex build --verbose
    """
    channels_path = channels or settings.channels_file
    output_path = output or settings.output_file

    log_file = _setup_build_logging(settings.logs_dir, verbose=verbose)
    console.print(f"[dim]Logging to: {log_file}[/dim]")
    if verbose:
        console.print("[dim]Verbose logging enabled (DEBUG level)[/dim]")

    try:
        _run_build(channels_path, output_path, sources)
    finally:
        _teardown_build_logging()


def _run_build(
    channels_path: Path, output_path: Path, sources: Optional[str]
) -> None:
    try:
        source_list = build_sources(settings, order=_parse_source_names(sources))
    except ConfigurationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(code=EXIT_CODE_INVALID_ARGS)

    try:
        references = load_channel_references(channels_path)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(code=EXIT_CODE_GENERAL_ERROR)

    console.print(
        f"[cyan]Building directory for {len(references)} listed channel(s) "
        f"using {', '.join(s.name for s in source_list)}[/cyan]"
    )

    try:
        directory = asyncio.run(_build_async(references, source_list, settings))
    except KeyboardInterrupt:
        console.print("\n[yellow]Build interrupted by user[/yellow]")
        raise typer.Exit(code=EXIT_CODE_INTERRUPTED)

    try:
        write_directory(directory, output_path)
    except OutputWriteError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(code=EXIT_CODE_GENERAL_ERROR)

    _display_summary(directory, output_path)
