"""
Source descriptors for channel lookups.

A source is a page that can supply channel metrics: a URL builder, a parser,
its own retry policy and any extra request headers. The reconciler iterates
an ordered list of sources, so fallback priority is a setting
(``source_order``) rather than code.

Built-in sources
----------------
youtube_about
    The channel's ``/about`` page. Supplies identity and all three counts.
youtube_channel
    The channel home page. Supplies subscriber and upload counts from the
    page header.
socialblade
    A third-party statistics page, read as rendered text.
"""

from __future__ import annotations

import logging
import secrets
from typing import Callable, Mapping
from urllib.parse import parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from tubedex.config.settings import Settings
from tubedex.exceptions import ChannelMismatchError, ConfigurationError, PageParseError
from tubedex.models.enums import MetricKind, ReferenceKind
from tubedex.services.scraping.models import (
    ChannelLookup,
    PlausibilityBounds,
    RetryPolicy,
    SourceResult,
)
from tubedex.services.scraping.page_parser import (
    ChannelPageParser,
    StatisticsPageParser,
)
from tubedex.services.scraping.references import classify_reference, legacy_path

logger = logging.getLogger(__name__)

YOUTUBE_BASE_URL = "https://www.youtube.com"
SOCIALBLADE_BASE_URL = "https://socialblade.com"

_LOCALE_PARAMS: dict[str, str] = {
    "hl": "en",
    "gl": "US",
    "persist_hl": "1",
    "persist_gl": "1",
}
_CACHE_BUST_PARAM = "cbrd"

UrlBuilder = Callable[[str], str]
PageParse = Callable[[str, ChannelLookup], SourceResult]


def with_query_params(url: str, params: Mapping[str, str]) -> str:
    """Return ``url`` with ``params`` set, replacing existing values."""
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query.update(params)
    return urlunsplit(parts._replace(query=urlencode(query)))


def _channel_path(reference: str) -> str:
    """Platform path for a non-URL reference."""
    kind = classify_reference(reference)
    if kind is ReferenceKind.CHANNEL_ID:
        return f"/channel/{reference}"
    if kind is ReferenceKind.HANDLE:
        return f"/{reference}"
    return f"/@{reference.lstrip('@')}"


def youtube_about_url(reference: str) -> str:
    """
    Build the ``/about`` page URL for a reference, pinned to English/US.

    Examples
    --------
    >>> youtube_about_url("@veritasium")
    'https://www.youtube.com/@veritasium/about?hl=en&gl=US&persist_hl=1&persist_gl=1'
    """
    if classify_reference(reference) is ReferenceKind.URL:
        parts = urlsplit(reference)
        path = parts.path.rstrip("/")
        if not path.endswith("/about"):
            path = f"{path}/about"
        return with_query_params(urlunsplit(parts._replace(path=path)), _LOCALE_PARAMS)
    return with_query_params(
        f"{YOUTUBE_BASE_URL}{_channel_path(reference)}/about", _LOCALE_PARAMS
    )


def youtube_channel_url(reference: str) -> str:
    """Build the channel home page URL for a reference."""
    if classify_reference(reference) is ReferenceKind.URL:
        parts = urlsplit(reference)
        path = parts.path.rstrip("/")
        if path.endswith("/about"):
            path = path[: -len("/about")]
        return with_query_params(urlunsplit(parts._replace(path=path)), _LOCALE_PARAMS)
    return with_query_params(
        f"{YOUTUBE_BASE_URL}{_channel_path(reference)}", _LOCALE_PARAMS
    )


def socialblade_url(reference: str) -> str:
    """
    Build the statistics site's realtime page URL for a reference.

    Examples
    --------
    >>> socialblade_url("@veritasium")
    'https://socialblade.com/youtube/handle/veritasium/realtime'
    """
    kind = classify_reference(reference)
    if kind is ReferenceKind.CHANNEL_ID:
        return f"{SOCIALBLADE_BASE_URL}/youtube/channel/{reference}/realtime"
    if kind is ReferenceKind.URL:
        legacy = legacy_path(reference)
        if legacy is not None:
            segment, name = legacy
            return f"{SOCIALBLADE_BASE_URL}/youtube/{segment}/{name}/realtime"
        tail = [p for p in urlsplit(reference).path.split("/") if p]
        name = tail[-1] if tail else reference
        return f"{SOCIALBLADE_BASE_URL}/youtube/handle/{name.lstrip('@')}/realtime"
    return f"{SOCIALBLADE_BASE_URL}/youtube/handle/{reference.lstrip('@')}/realtime"


def check_identity(reference: str, result: SourceResult) -> None:
    """
    Raise ChannelMismatchError if ``result`` belongs to another channel.

    Only detectable mismatches count: a stable ID reference against a
    different ID on the page, or a handle reference against a different
    handle. Missing identity on the page is not a mismatch.
    """
    kind = classify_reference(reference)
    if kind is ReferenceKind.CHANNEL_ID and result.channel_id:
        if result.channel_id != reference:
            raise ChannelMismatchError(
                message=f"Requested {reference} but page is {result.channel_id}",
                expected=reference,
                found=result.channel_id,
            )
    elif kind is ReferenceKind.HANDLE and result.handle:
        if unquote(result.handle).casefold() != unquote(reference).casefold():
            raise ChannelMismatchError(
                message=f"Requested {reference} but page is {result.handle}",
                expected=reference,
                found=result.handle,
            )


class SourceDescriptor:
    """
    One page source in the reconciliation order.

    Parameters
    ----------
    name : str
        Registry name, used in logs and the ``filled_by`` map.
    url_builder : UrlBuilder
        Maps a reference to the page URL.
    parser : PageParse
        Maps page text and the lookup-so-far to a SourceResult.
    retry_policy : RetryPolicy
        Attempt budget for this source's fetches.
    extra_headers : Mapping[str, str] | None, optional
        Headers added to this source's requests.
    verify_identity : bool, optional
        Whether the page must match the requested channel (default: False).
    """

    def __init__(
        self,
        name: str,
        url_builder: UrlBuilder,
        parser: PageParse,
        retry_policy: RetryPolicy,
        extra_headers: Mapping[str, str] | None = None,
        verify_identity: bool = False,
    ) -> None:
        self.name = name
        self.url_builder = url_builder
        self.parser = parser
        self.retry_policy = retry_policy
        self.extra_headers = dict(extra_headers or {})
        self.verify_identity = verify_identity

    def __repr__(self) -> str:
        return f"SourceDescriptor(name={self.name!r}, attempts={self.retry_policy.max_attempts})"

    def build_url(self, reference: str, cache_bust: bool = False) -> str:
        """Build the page URL, optionally with a cache-busting parameter."""
        url = self.url_builder(reference)
        if cache_bust:
            url = with_query_params(url, {_CACHE_BUST_PARAM: secrets.token_hex(4)})
        return url

    def parse(self, html: str, url: str, reference: str, lookup: ChannelLookup) -> SourceResult:
        """
        Parse a fetched page.

        Raises
        ------
        PageParseError
            If the page yielded nothing usable.
        ChannelMismatchError
            If identity verification is on and the page is another channel's.
        """
        result = self.parser(html, lookup)
        if not result.has_data:
            raise PageParseError(
                message=f"{self.name}: no channel data found at {url}",
                url=url,
                reason="no_data",
            )
        if self.verify_identity:
            check_identity(reference, result)
        return result


def bounds_from_settings(settings: Settings) -> PlausibilityBounds:
    """Plausibility limits configured in settings."""
    return PlausibilityBounds(
        min_views=settings.min_plausible_views,
        max_videos=settings.max_plausible_videos,
    )


def _youtube_about(settings: Settings, policy: RetryPolicy) -> SourceDescriptor:
    parser = ChannelPageParser()
    return SourceDescriptor(
        name="youtube_about",
        url_builder=youtube_about_url,
        parser=lambda html, lookup: parser.parse(html),
        retry_policy=policy,
        verify_identity=True,
    )


def _youtube_channel(settings: Settings, policy: RetryPolicy) -> SourceDescriptor:
    # Home page view counts are per video, not channel totals.
    parser = ChannelPageParser(metrics={MetricKind.SUBSCRIBERS, MetricKind.VIDEOS})
    return SourceDescriptor(
        name="youtube_channel",
        url_builder=youtube_channel_url,
        parser=lambda html, lookup: parser.parse(html),
        retry_policy=policy,
        verify_identity=True,
    )


def _socialblade(settings: Settings, policy: RetryPolicy) -> SourceDescriptor:
    parser = StatisticsPageParser(bounds=bounds_from_settings(settings))
    return SourceDescriptor(
        name="socialblade",
        url_builder=socialblade_url,
        parser=lambda html, lookup: parser.parse(html, known_subscribers=lookup.subs),
        retry_policy=policy,
        extra_headers={"Referer": f"{SOCIALBLADE_BASE_URL}/"},
    )


SOURCE_REGISTRY: dict[str, Callable[[Settings, RetryPolicy], SourceDescriptor]] = {
    "youtube_about": _youtube_about,
    "youtube_channel": _youtube_channel,
    "socialblade": _socialblade,
}


def build_sources(
    settings: Settings, order: list[str] | None = None
) -> list[SourceDescriptor]:
    """
    Instantiate sources in priority order.

    The first source gets the primary retry policy; the rest get the
    fallback policy.

    Raises
    ------
    ConfigurationError
        If a name is not registered or the order is empty.
    """
    names = order if order is not None else settings.source_order
    if not names:
        raise ConfigurationError("At least one source must be configured")

    unknown = [name for name in names if name not in SOURCE_REGISTRY]
    if unknown:
        raise ConfigurationError(
            f"Unknown source(s): {', '.join(unknown)}. "
            f"Available: {', '.join(SOURCE_REGISTRY)}"
        )

    primary_policy = RetryPolicy(
        max_attempts=settings.retry_attempts, base_delay=settings.retry_backoff
    )
    fallback_policy = RetryPolicy(
        max_attempts=settings.fallback_retry_attempts,
        base_delay=settings.fallback_retry_backoff,
    )

    sources = [
        SOURCE_REGISTRY[name](settings, primary_policy if i == 0 else fallback_policy)
        for i, name in enumerate(dict.fromkeys(names))
    ]
    logger.debug("Configured sources: %s", ", ".join(s.name for s in sources))
    return sources
