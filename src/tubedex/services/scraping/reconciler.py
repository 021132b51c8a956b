"""
Multi-source reconciliation for one channel reference.

Queries the primary source, then each fallback in order while any metric is
still missing. Fields are merged first-non-null-wins and never overwritten.
Fetch failures (after retries), parse failures and identity mismatches make
a source unavailable for this reference but never abort the lookup.
"""

from __future__ import annotations

import logging
from typing import Sequence

from tubedex.exceptions import ChannelMismatchError, FetchError, PageParseError
from tubedex.models.enums import MetricKind
from tubedex.services.scraping.http import PageFetcher, fetch_with_retry
from tubedex.services.scraping.models import (
    ChannelLookup,
    PlausibilityBounds,
    SourceResult,
)
from tubedex.services.scraping.sources import SourceDescriptor

logger = logging.getLogger(__name__)


async def query_source(
    source: SourceDescriptor,
    reference: str,
    fetcher: PageFetcher,
    lookup: ChannelLookup,
) -> SourceResult:
    """
    Fetch and parse one source for ``reference``.

    An identity mismatch triggers exactly one retry with a cache-busting
    URL; a second mismatch propagates.

    Raises
    ------
    FetchError
        When every fetch attempt failed.
    PageParseError
        When the page yielded nothing usable.
    ChannelMismatchError
        When the page belongs to another channel twice in a row.
    """
    url = source.build_url(reference)
    html = await fetch_with_retry(
        fetcher, url, source.retry_policy, extra_headers=source.extra_headers
    )
    try:
        return source.parse(html, url, reference, lookup)
    except ChannelMismatchError as e:
        logger.warning(
            "%s returned %s for %s, retrying once with a fresh URL",
            source.name,
            e.found,
            reference,
        )

    url = source.build_url(reference, cache_bust=True)
    html = await fetch_with_retry(
        fetcher, url, source.retry_policy, extra_headers=source.extra_headers
    )
    return source.parse(html, url, reference, lookup)


def merge_result(
    lookup: ChannelLookup,
    result: SourceResult,
    source_name: str,
    bounds: PlausibilityBounds,
) -> list[MetricKind]:
    """
    Fill still-missing metrics on ``lookup`` from ``result``.

    Implausible values are dropped. A declared-hidden subscriber count is
    never filled.

    Returns
    -------
    list[MetricKind]
        Metrics this result filled.
    """
    filled: list[MetricKind] = []
    for kind in MetricKind:
        if lookup.metric(kind) is not None:
            continue
        if kind is MetricKind.SUBSCRIBERS and lookup.subscribers_hidden:
            continue

        value = result.metric(kind)
        if value is None:
            continue
        if not bounds.accepts(kind, value):
            logger.debug(
                "Discarding implausible %s=%d from %s", kind.value, value, source_name
            )
            continue

        setattr(lookup, kind.value, value)
        lookup.filled_by[kind.value] = source_name
        filled.append(kind)
    return filled


def _apply_identity(lookup: ChannelLookup, result: SourceResult) -> None:
    lookup.title = result.title
    lookup.pfp = result.pfp
    lookup.handle = result.handle
    lookup.channel_id = result.channel_id
    lookup.verified = result.verified
    lookup.subscribers_hidden = result.subscribers_hidden


async def reconcile_channel(
    reference: str,
    fetcher: PageFetcher,
    sources: Sequence[SourceDescriptor],
    bounds: PlausibilityBounds | None = None,
) -> ChannelLookup:
    """
    Resolve identity and metrics for one normalized reference.

    Parameters
    ----------
    reference : str
        Normalized channel reference.
    fetcher : PageFetcher
        Page fetcher shared across sources.
    sources : Sequence[SourceDescriptor]
        Sources in priority order; the first is the primary.
    bounds : PlausibilityBounds | None, optional
        Plausibility limits for merged values.

    Returns
    -------
    ChannelLookup
        Partial or complete result. Metrics no source produced stay None.

    Examples
    --------
    >>> lookup = await reconcile_channel("@veritasium", fetcher, build_sources(settings))
    >>> lookup.filled_by
    {'subs': 'youtube_about', 'views': 'youtube_about', 'videos': 'socialblade'}
    """
    bounds = bounds or PlausibilityBounds()
    lookup = ChannelLookup(reference=reference)

    for position, source in enumerate(sources):
        is_primary = position == 0
        if not is_primary and not lookup.missing_metrics:
            break

        # Fallbacks are addressed by the best identity resolved so far
        target = (
            reference
            if is_primary
            else (lookup.handle or lookup.channel_id or reference)
        )
        lookup.sources_tried.append(source.name)

        try:
            result = await query_source(source, target, fetcher, lookup)
        except FetchError as e:
            logger.warning("%s unavailable for %s: %s", source.name, reference, e.message)
            continue
        except PageParseError as e:
            logger.warning("%s unparseable for %s: %s", source.name, reference, e.message)
            continue
        except ChannelMismatchError as e:
            logger.warning(
                "%s kept serving %s for %s, skipping", source.name, e.found, reference
            )
            continue

        if is_primary:
            _apply_identity(lookup, result)

        filled = merge_result(lookup, result, source.name, bounds)
        logger.debug(
            "%s filled %s for %s",
            source.name,
            ", ".join(k.value for k in filled) or "nothing",
            reference,
        )

    return lookup
