"""
Directory view helpers.

Pure functions behind ``tubedex show``: compact count formatting, search
filtering and column sorting over the records of a directory document.
"""

from __future__ import annotations

from typing import Iterable, Optional

from tubedex.models.channel import ChannelRecord
from tubedex.models.enums import SortKey

MISSING_COUNT = "—"
HIDDEN_LABEL = "Hidden"


def format_count(value: Optional[int]) -> str:
    """
    Format a count for display.

    Examples
    --------
    >>> format_count(4_620_000)
    '4.62M'
    >>> format_count(12_000)
    '12.0K'
    >>> format_count(322)
    '322'
    >>> format_count(None)
    '—'
    """
    if value is None:
        return MISSING_COUNT
    if value >= 1_000_000:
        return f"{value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return f"{value:,}"


def subscriber_cell(record: ChannelRecord) -> str:
    """Subscriber column text; hidden or unavailable counts read "Hidden"."""
    if record.hidden_subs:
        return HIDDEN_LABEL
    return format_count(record.subs)


def filter_channels(
    channels: Iterable[ChannelRecord], query: Optional[str] = None
) -> list[ChannelRecord]:
    """Keep records whose title or handle contains ``query`` (case-insensitive)."""
    needle = (query or "").strip().casefold()
    if not needle:
        return list(channels)
    return [
        record
        for record in channels
        if needle in record.title.casefold()
        or needle in (record.handle or "").casefold()
    ]


def sort_channels(
    channels: Iterable[ChannelRecord],
    key: SortKey = SortKey.SUBS,
    descending: Optional[bool] = None,
) -> list[ChannelRecord]:
    """
    Order records by a view column.

    Parameters
    ----------
    channels : Iterable[ChannelRecord]
        Records to order.
    key : SortKey, optional
        Column to sort by (default: subscribers).
    descending : bool | None, optional
        Sort direction. ``None`` uses the column default: ascending for
        ``name``, descending for the counts.

    Returns
    -------
    list[ChannelRecord]
        A new, sorted list. Missing counts sort as 0.
    """
    if descending is None:
        descending = key is not SortKey.NAME

    if key is SortKey.NAME:
        return sorted(
            channels, key=lambda record: record.title.lower(), reverse=descending
        )
    return sorted(
        channels,
        key=lambda record: getattr(record, key.value) or 0,
        reverse=descending,
    )
