"""
Enums for tubedex models.

Defines enumeration types used across the application for consistent
type safety and validation.
"""

from __future__ import annotations

from enum import Enum


class ReferenceKind(str, Enum):
    """Canonical shapes a channel reference can take after normalization."""

    CHANNEL_ID = "channel_id"
    HANDLE = "handle"
    URL = "url"
    NAME = "name"


class MetricKind(str, Enum):
    """Channel metrics scraped from source pages.

    Values match the field names of the output document.
    """

    SUBSCRIBERS = "subs"
    VIEWS = "views"
    VIDEOS = "videos"


class WindowDirection(str, Enum):
    """Which side of a label the numeric search window lies on."""

    AFTER = "after"
    BEFORE = "before"


class SelectionPolicy(str, Enum):
    """How a single value is chosen from a window's candidates."""

    FIRST = "first"
    MIN = "min"
    MAX = "max"


class TokenPattern(str, Enum):
    """Numeric token classes, in priority order."""

    SUFFIXED = "suffixed"
    GROUPED = "grouped"
    BARE = "bare"


class BackoffStrategy(str, Enum):
    """Delay growth between retry attempts."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"


class SortKey(str, Enum):
    """Columns the directory view can be ordered by."""

    NAME = "name"
    SUBS = "subs"
    VIDEOS = "videos"
    VIEWS = "views"
