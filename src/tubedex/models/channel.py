"""
Channel directory models.

Defines the Pydantic models that make up the output document consumed by
the display layer. Field aliases match the document's JSON keys, which must
stay stable.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .youtube_types import ChannelId, Handle

FALLBACK_TITLE = "Channel"


class ChannelRecord(BaseModel):
    """One entry of the channel directory."""

    input: str = Field(..., description="Normalized input reference")
    channel_id: Optional[ChannelId] = Field(
        default=None, alias="id", description="Resolved stable channel ID"
    )
    handle: Optional[Handle] = Field(default=None, description="Resolved handle")
    title: str = Field(..., min_length=1, description="Display title")
    pfp: str = Field(default="", description="Avatar URL")
    verified: bool = Field(default=False, description="Verified badge present")
    subs: Optional[int] = Field(default=None, ge=0, description="Subscriber count")
    views: Optional[int] = Field(default=None, ge=0, description="Lifetime views")
    videos: Optional[int] = Field(default=None, ge=0, description="Upload count")
    hidden_subs: bool = Field(
        default=False,
        alias="hiddenSubs",
        description="Subscriber count hidden or unavailable",
    )

    @model_validator(mode="before")
    @classmethod
    def fill_title(cls, data: Any) -> Any:
        """Fall back to handle, then ID, then a literal title."""
        if not isinstance(data, dict):
            return data
        title = (data.get("title") or "").strip()
        if not title:
            title = (
                data.get("handle")
                or data.get("id")
                or data.get("channel_id")
                or FALLBACK_TITLE
            )
        return {**data, "title": title}

    @property
    def sort_name(self) -> str:
        """Name used for directory ordering."""
        return self.title or self.handle or self.channel_id or ""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ChannelDirectory(BaseModel):
    """The output document: a timestamp plus ordered channel records."""

    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="generatedAt",
        description="When the directory was generated (UTC)",
    )
    channels: List[ChannelRecord] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize using the document's field names."""
        return self.model_dump_json(by_alias=True, indent=2)

    model_config = ConfigDict(populate_by_name=True)
