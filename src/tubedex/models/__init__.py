"""
Data models module for tubedex.

Defines Pydantic models for channel references, directory records and the
output document, with full type safety and validation.
"""

from __future__ import annotations

from .channel import FALLBACK_TITLE, ChannelDirectory, ChannelRecord
from .enums import (
    BackoffStrategy,
    MetricKind,
    ReferenceKind,
    SelectionPolicy,
    SortKey,
    TokenPattern,
    WindowDirection,
)
from .youtube_types import ChannelId, Handle

__all__ = [
    "FALLBACK_TITLE",
    "ChannelDirectory",
    "ChannelRecord",
    "BackoffStrategy",
    "MetricKind",
    "ReferenceKind",
    "SelectionPolicy",
    "SortKey",
    "TokenPattern",
    "WindowDirection",
    "ChannelId",
    "Handle",
]
