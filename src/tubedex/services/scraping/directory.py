"""
Directory assembly and persistence.

Reads the channel list, runs the reconciler for each deduplicated reference
one at a time with a pacing delay, converts lookups into records, sorts
them and writes the output document, fully replacing any previous one.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Sequence

from pydantic import TypeAdapter, ValidationError

from tubedex.config.settings import Settings
from tubedex.exceptions import ConfigurationError, OutputWriteError
from tubedex.models.channel import ChannelDirectory, ChannelRecord
from tubedex.services.scraping.http import PageFetcher
from tubedex.services.scraping.models import ChannelLookup
from tubedex.services.scraping.reconciler import reconcile_channel
from tubedex.services.scraping.references import (
    dedupe_references,
    is_channel_id,
    is_handle,
)
from tubedex.services.scraping.sources import SourceDescriptor, bounds_from_settings

logger = logging.getLogger(__name__)

_REFERENCE_LIST = TypeAdapter(list[str])

ProgressCallback = Callable[[int, int, ChannelRecord], None]


def load_channel_references(path: Path) -> list[str]:
    """
    Read the channel list (a JSON array of strings).

    Raises
    ------
    ConfigurationError
        If the file is missing, unreadable, not JSON, or not a string list.
    """
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read channel list {path}: {e.strerror or e}", path=path
        ) from e

    try:
        return _REFERENCE_LIST.validate_json(raw_text)
    except ValidationError as e:
        raise ConfigurationError(
            f"Channel list {path} must be a JSON array of strings: "
            f"{e.error_count()} error(s)",
            path=path,
        ) from e


def record_from_lookup(reference: str, lookup: ChannelLookup) -> ChannelRecord:
    """
    Build the directory record for a reconciled lookup.

    Identity found on the page wins; otherwise the reference itself supplies
    the handle or ID when it has that shape. ``hiddenSubs`` is set when the
    primary source declared the count hidden or no source produced one.
    """
    channel_id = lookup.channel_id if is_channel_id(lookup.channel_id) else None
    if channel_id is None and is_channel_id(reference):
        channel_id = reference

    handle = lookup.handle if is_handle(lookup.handle) else None
    if handle is None and is_handle(reference):
        handle = reference

    subs = None if lookup.subscribers_hidden else lookup.subs

    return ChannelRecord(
        input=reference,
        id=channel_id,
        handle=handle,
        title=lookup.title or "",
        pfp=lookup.pfp or "",
        verified=lookup.verified,
        subs=subs,
        views=lookup.views,
        videos=lookup.videos,
        hiddenSubs=lookup.subscribers_hidden or subs is None,
    )


def fallback_record(reference: str) -> ChannelRecord:
    """Identity-only record for a reference whose whole pipeline failed."""
    return record_from_lookup(reference, ChannelLookup(reference=reference))


def sort_records(records: Iterable[ChannelRecord]) -> list[ChannelRecord]:
    """Order records case-insensitively by title, else handle, else ID."""
    return sorted(records, key=lambda record: record.sort_name.casefold())


def pacing_delay(settings: Settings) -> float:
    """Seconds to wait before the next reference: base plus random jitter."""
    return settings.pacing_base_delay + random.uniform(0, settings.pacing_jitter)


async def build_directory(
    references: Iterable[str],
    fetcher: PageFetcher,
    sources: Sequence[SourceDescriptor],
    settings: Settings,
    progress: ProgressCallback | None = None,
) -> ChannelDirectory:
    """
    Build the full directory from raw references.

    References are normalized and deduplicated, then processed strictly in
    order. A failure of one reference's pipeline produces an identity-only
    record and never aborts the batch.

    Parameters
    ----------
    references : Iterable[str]
        Raw references from the channel list.
    fetcher : PageFetcher
        Page fetcher.
    sources : Sequence[SourceDescriptor]
        Sources in priority order.
    settings : Settings
        Pacing and plausibility configuration.
    progress : ProgressCallback | None, optional
        Called with ``(index, total, record)`` after each reference.

    Returns
    -------
    ChannelDirectory
        Sorted records with a fresh generation timestamp.
    """
    inputs = dedupe_references(references)
    bounds = bounds_from_settings(settings)
    records: list[ChannelRecord] = []

    for i, reference in enumerate(inputs):
        if i > 0:
            await asyncio.sleep(pacing_delay(settings))

        try:
            lookup = await reconcile_channel(reference, fetcher, sources, bounds)
            record = record_from_lookup(reference, lookup)
        except Exception as e:
            logger.error(
                "Lookup failed for %s (%s: %s), keeping identity only",
                reference,
                type(e).__name__,
                e,
            )
            record = fallback_record(reference)

        records.append(record)
        logger.info(
            "[%d/%d] %s - subs:%s views:%s vids:%s",
            i + 1,
            len(inputs),
            record.title,
            record.subs if record.subs is not None else "?",
            record.views if record.views is not None else "?",
            record.videos if record.videos is not None else "?",
        )
        if progress is not None:
            progress(i + 1, len(inputs), record)

    return ChannelDirectory(
        generatedAt=datetime.now(timezone.utc),
        channels=sort_records(records),
    )


def write_directory(directory: ChannelDirectory, path: Path) -> None:
    """
    Write the directory document, replacing any existing file.

    Raises
    ------
    OutputWriteError
        If the directory or file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(directory.to_json(), encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(
            f"Cannot write directory to {path}: {e.strerror or e}", path=path
        ) from e


def load_directory(path: Path) -> ChannelDirectory:
    """
    Read a previously written directory document.

    Raises
    ------
    ConfigurationError
        If the file is missing or not a valid directory document.
    """
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read directory {path}: {e.strerror or e}", path=path
        ) from e

    try:
        return ChannelDirectory.model_validate(json.loads(raw_text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ConfigurationError(
            f"{path} is not a valid directory document", path=path
        ) from e
