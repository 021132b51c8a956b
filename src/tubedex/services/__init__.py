"""
Services module for tubedex.

Contains the channel scraping pipeline (reference normalization, page
fetching, metric extraction, multi-source reconciliation, directory
assembly) and the terminal directory view.
"""

from __future__ import annotations

from tubedex.services.directory_view import (
    SortKey,
    filter_channels,
    format_count,
    sort_channels,
)

__all__: list[str] = ["SortKey", "filter_channels", "format_count", "sort_channels"]
