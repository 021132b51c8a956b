"""
Pydantic models for the channel scraping pipeline.

Provides validated data models for the intermediate values produced while
extracting and reconciling channel metrics.

Models
------
MetricCandidate
    A number found inside a label's search window.
LabelRule
    One "label -> window -> candidates -> selection" extraction rule.
PlausibilityBounds
    Per-metric accepted value ranges.
RetryPolicy
    Attempt count and back-off schedule for page fetches.
SourceResult
    What a single source page yielded.
ChannelLookup
    Reconciled outcome for one channel reference.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tubedex.models.enums import (
    BackoffStrategy,
    MetricKind,
    SelectionPolicy,
    TokenPattern,
    WindowDirection,
)


class MetricCandidate(BaseModel):
    """
    A numeric value found inside a label's search window.

    Attributes
    ----------
    value : int
        Parsed integer value.
    token : str
        The text the value was parsed from.
    pattern : TokenPattern
        Which token class matched.
    offset : int
        Character offset of the token relative to the label. Negative when
        the window precedes the label.
    """

    model_config = ConfigDict(frozen=True)

    value: int
    token: str
    pattern: TokenPattern
    offset: int


class LabelRule(BaseModel):
    """
    A single extraction rule for one metric.

    Attributes
    ----------
    metric : MetricKind
        The metric this rule extracts.
    labels : tuple[str, ...]
        Label strings, tried in order; matched case-insensitively.
    window : int
        Number of characters searched next to the label.
    direction : WindowDirection
        Whether the window follows or precedes the label.
    policy : SelectionPolicy
        How one value is chosen from the window's candidates.
    min_bare_digits : int
        Minimum length of an unseparated digit run to count as a candidate.
    """

    model_config = ConfigDict(frozen=True)

    metric: MetricKind
    labels: tuple[str, ...]
    window: int = Field(default=800, gt=0)
    direction: WindowDirection = WindowDirection.AFTER
    policy: SelectionPolicy = SelectionPolicy.FIRST
    min_bare_digits: int = Field(default=2, ge=1)

    @field_validator("labels")
    @classmethod
    def validate_labels(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Require at least one non-empty label."""
        cleaned = tuple(label for label in v if label)
        if not cleaned:
            raise ValueError("labels must contain at least one non-empty string")
        return cleaned


class PlausibilityBounds(BaseModel):
    """Accepted value range per metric; ``None`` means unbounded."""

    model_config = ConfigDict(frozen=True)

    min_subscribers: Optional[int] = None
    max_subscribers: Optional[int] = None
    min_views: Optional[int] = 1_000
    max_views: Optional[int] = None
    min_videos: Optional[int] = None
    max_videos: Optional[int] = 1_000_000

    def accepts(self, metric: MetricKind, value: int) -> bool:
        """Check whether ``value`` is plausible for ``metric``."""
        low, high = {
            MetricKind.SUBSCRIBERS: (self.min_subscribers, self.max_subscribers),
            MetricKind.VIEWS: (self.min_views, self.max_views),
            MetricKind.VIDEOS: (self.min_videos, self.max_videos),
        }[metric]
        if value < 0:
            return False
        if low is not None and value < low:
            return False
        if high is not None and value > high:
            return False
        return True


class RetryPolicy(BaseModel):
    """
    Attempt budget and back-off schedule for one source.

    Attributes
    ----------
    max_attempts : int
        Total number of attempts, including the first.
    base_delay : float
        Delay unit in seconds.
    strategy : BackoffStrategy
        ``linear`` waits ``base_delay * attempt``; ``exponential`` waits
        ``base_delay * 2 ** (attempt - 1)``.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=0.8, ge=0)
    strategy: BackoffStrategy = BackoffStrategy.LINEAR

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        if self.strategy is BackoffStrategy.EXPONENTIAL:
            return self.base_delay * (2 ** (attempt - 1))
        return self.base_delay * attempt


class SourceResult(BaseModel):
    """Identity and metrics one source page yielded."""

    title: Optional[str] = None
    pfp: Optional[str] = None
    handle: Optional[str] = None
    channel_id: Optional[str] = None
    verified: bool = False
    subs: Optional[int] = None
    views: Optional[int] = None
    videos: Optional[int] = None
    subscribers_hidden: bool = False

    def metric(self, kind: MetricKind) -> Optional[int]:
        """Return the value for ``kind``."""
        return getattr(self, kind.value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_data(self) -> bool:
        """True when any identity field or metric was found."""
        return any(
            [
                self.title,
                self.handle,
                self.channel_id,
                self.subs is not None,
                self.views is not None,
                self.videos is not None,
                self.subscribers_hidden,
            ]
        )


class ChannelLookup(BaseModel):
    """
    Reconciled outcome for one channel reference.

    Attributes
    ----------
    reference : str
        The normalized reference that was looked up.
    title, pfp, handle, channel_id, verified
        Identity taken from the primary source.
    subs, views, videos : int | None
        Merged metrics, first non-null plausible value per source order.
    subscribers_hidden : bool
        Whether the primary source declared the subscriber count hidden.
    filled_by : dict[str, str]
        Metric name to the source name that supplied it.
    sources_tried : list[str]
        Source names consulted, in order.
    """

    reference: str
    title: Optional[str] = None
    pfp: Optional[str] = None
    handle: Optional[str] = None
    channel_id: Optional[str] = None
    verified: bool = False
    subs: Optional[int] = None
    views: Optional[int] = None
    videos: Optional[int] = None
    subscribers_hidden: bool = False
    filled_by: dict[str, str] = Field(default_factory=dict)
    sources_tried: list[str] = Field(default_factory=list)

    def metric(self, kind: MetricKind) -> Optional[int]:
        """Return the value for ``kind``."""
        return getattr(self, kind.value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def missing_metrics(self) -> list[MetricKind]:
        """Metrics still unresolved, excluding a declared-hidden count."""
        missing: list[MetricKind] = []
        for kind in MetricKind:
            if kind is MetricKind.SUBSCRIBERS and self.subscribers_hidden:
                continue
            if self.metric(kind) is None:
                missing.append(kind)
        return missing
