"""
Channel reference normalization.

Turns the heterogeneous entries of a channel list (full URLs, handles,
stable IDs, bare names) into canonical strings so that equivalent entries
collapse into one directory record.

Functions
---------
normalize_reference
    Canonicalize one raw reference. Pure and idempotent.
dedupe_references
    Normalize a list and drop empties and duplicates, keeping order.
classify_reference
    Report which canonical shape a normalized reference has.
"""

from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import urlsplit

from tubedex.models.enums import ReferenceKind
from tubedex.models.youtube_types import CHANNEL_ID_PATTERN, HANDLE_PATTERN

_URL_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_CHANNEL_PATH_RE = re.compile(r"/channel/([A-Za-z0-9_-]{24})")
_HANDLE_PATH_RE = re.compile(r"/@([^/?#]+)")


def is_url(value: str | None) -> bool:
    """Check whether ``value`` looks like an absolute http(s) URL."""
    return bool(value) and bool(_URL_SCHEME_RE.match(value or ""))


def is_channel_id(value: str | None) -> bool:
    """Check whether ``value`` is a stable channel ID (``UC`` + 22 chars)."""
    return bool(value) and bool(CHANNEL_ID_PATTERN.match(value or ""))


def is_handle(value: str | None) -> bool:
    """Check whether ``value`` is an ``@``-prefixed handle."""
    return bool(value) and bool(HANDLE_PATTERN.match(value or ""))


def normalize_reference(raw: str | None) -> str:
    """
    Canonicalize a raw channel reference.

    Non-URL input is returned stripped but otherwise unchanged. For URLs,
    a ``/channel/<id>`` path segment yields the ID and an ``/@name`` segment
    yields ``"@name"``. Any other URL shape (legacy ``/c/`` or ``/user/``
    paths) is returned as-is and acts as its own canonical form.

    Parameters
    ----------
    raw : str | None
        The reference as written in the channel list.

    Returns
    -------
    str
        Canonical reference; empty string for empty input.

    Examples
    --------
    >>> normalize_reference("https://www.youtube.com/@LinusTechTips/videos")
    '@LinusTechTips'
    >>> normalize_reference("https://youtube.com/channel/UCXuqSBlHAE6Xw-yeJA0Tunw")
    'UCXuqSBlHAE6Xw-yeJA0Tunw'
    >>> normalize_reference("@LinusTechTips")
    '@LinusTechTips'
    """
    text = (raw or "").strip()
    if not is_url(text):
        return text

    try:
        path = urlsplit(text).path
    except ValueError:
        return text

    id_match = _CHANNEL_PATH_RE.search(path)
    if id_match:
        return id_match.group(1)

    handle_match = _HANDLE_PATH_RE.search(path)
    if handle_match:
        return "@" + handle_match.group(1)

    return text


def dedupe_references(raws: Iterable[str | None]) -> list[str]:
    """
    Normalize references, dropping empties and duplicates.

    The first occurrence of each canonical form keeps its position.
    """
    normalized = (normalize_reference(raw) for raw in raws)
    return list(dict.fromkeys(ref for ref in normalized if ref))


def classify_reference(value: str) -> ReferenceKind:
    """Return the canonical shape of a normalized reference."""
    if is_channel_id(value):
        return ReferenceKind.CHANNEL_ID
    if is_handle(value):
        return ReferenceKind.HANDLE
    if is_url(value):
        return ReferenceKind.URL
    return ReferenceKind.NAME


def legacy_path(value: str) -> tuple[str, str] | None:
    """
    Extract ``(kind, name)`` from a legacy ``/c/<name>`` or ``/user/<name>`` URL.

    Returns ``None`` when the URL has neither shape.
    """
    if not is_url(value):
        return None
    try:
        parts = [p for p in urlsplit(value).path.split("/") if p]
    except ValueError:
        return None
    if len(parts) >= 2 and parts[0] in ("c", "user"):
        return parts[0], parts[1]
    return None
