"""
Channel scraping pipeline.

Turns a list of channel references into a sorted channel directory by
fetching channel pages, extracting counts with a small label/window grammar
and reconciling values across an ordered list of sources.
"""

from __future__ import annotations

from tubedex.services.scraping.directory import (
    build_directory,
    load_channel_references,
    load_directory,
    sort_records,
    write_directory,
)
from tubedex.services.scraping.http import PageFetcher, fetch_with_retry
from tubedex.services.scraping.metrics import (
    extract_candidates,
    extract_metric,
    parse_count,
    parse_count_text,
    scan_candidates,
    select_candidate,
)
from tubedex.services.scraping.models import (
    ChannelLookup,
    LabelRule,
    MetricCandidate,
    PlausibilityBounds,
    RetryPolicy,
    SourceResult,
)
from tubedex.services.scraping.reconciler import reconcile_channel
from tubedex.services.scraping.references import (
    dedupe_references,
    normalize_reference,
)
from tubedex.services.scraping.sources import (
    SOURCE_REGISTRY,
    SourceDescriptor,
    build_sources,
)

__all__ = [
    # Pipeline
    "build_directory",
    "load_channel_references",
    "load_directory",
    "reconcile_channel",
    "sort_records",
    "write_directory",
    # Fetching
    "PageFetcher",
    "fetch_with_retry",
    # Grammar
    "extract_candidates",
    "extract_metric",
    "parse_count",
    "parse_count_text",
    "scan_candidates",
    "select_candidate",
    # References
    "dedupe_references",
    "normalize_reference",
    # Sources
    "SOURCE_REGISTRY",
    "SourceDescriptor",
    "build_sources",
    # Models
    "ChannelLookup",
    "LabelRule",
    "MetricCandidate",
    "PlausibilityBounds",
    "RetryPolicy",
    "SourceResult",
]
