"""
Custom validated types for video platform channel identifiers.

Provides strongly-typed wrappers for channel IDs and handles that enforce
format constraints at the type level.
"""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import BeforeValidator, Field

CHANNEL_ID_PATTERN = re.compile(r"^UC[A-Za-z0-9_-]{22}$")
HANDLE_PATTERN = re.compile(r"^@[^\s/?#]+$")


def validate_channel_id(v: str) -> str:
    """Validate YouTube Channel ID format."""
    if not isinstance(v, str):
        raise TypeError("ChannelId must be a string")

    # Check length
    if len(v) != 24:
        raise ValueError(
            f"ChannelId must be exactly 24 characters long, got {len(v)}: {v}"
        )

    # Check prefix
    if not v.startswith("UC"):
        raise ValueError(f'ChannelId must start with "UC", got: {v}')

    # Check valid characters (alphanumeric, hyphens, underscores)
    if not CHANNEL_ID_PATTERN.match(v):
        raise ValueError(f"ChannelId contains invalid characters: {v}")

    return v


def validate_handle(v: str) -> str:
    """Validate channel handle format (``@`` followed by a path-safe name)."""
    if not isinstance(v, str):
        raise TypeError("Handle must be a string")

    cleaned = v.strip()
    if not HANDLE_PATTERN.match(cleaned):
        raise ValueError(f'Handle must start with "@" and contain no spaces: {v}')

    return cleaned


# Type aliases for use in Pydantic models
ChannelId = Annotated[
    str,
    BeforeValidator(validate_channel_id),
    Field(description="YouTube Channel ID (24 chars, starts with UC)"),
]

Handle = Annotated[
    str,
    BeforeValidator(validate_handle),
    Field(description="Channel handle (starts with @)"),
]
