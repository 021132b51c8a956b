"""
Page parsers for channel metadata.

Extracts channel identity and counts from two kinds of pages:

- **Channel pages** on the video platform (``/about`` and the channel home
  page). Counts are extracted in three layers, per metric, stopping at the
  first layer that yields a value:

  1. Walk the embedded ``ytInitialData`` JSON for the count keys.
  2. Run the metric grammar over the raw source, using the JSON key names
     as labels (covers pages whose JSON blob fails to parse).
  3. Run the metric grammar over rendered phrases such as
     ``"4.62M subscribers"`` with the window preceding the label.

  Identity (title, avatar, handle, stable ID, verified badge) comes from
  HTML ``<meta>``/``<link>`` tags via BeautifulSoup, then from the JSON.

- **Statistics site pages**. The page is reduced to visible text and each
  metric is read with a disambiguating rule: uploads take the minimum
  plausible candidate, views the maximum, and any candidate equal to an
  already-known subscriber count is ignored.

Classes
-------
ChannelPageParser
    Parser for platform channel pages.
StatisticsPageParser
    Parser for third-party statistics pages.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Collection, Iterator

from bs4 import BeautifulSoup

from tubedex.models.enums import MetricKind, SelectionPolicy, WindowDirection
from tubedex.services.scraping.metrics import extract_metric, parse_count_text
from tubedex.services.scraping.models import (
    LabelRule,
    PlausibilityBounds,
    SourceResult,
)
from tubedex.services.scraping.references import is_channel_id

logger = logging.getLogger(__name__)

# Regex to locate the START of the ytInitialData JSON. The body is
# extracted via brace-counting in _extract_json_object().
_YT_INITIAL_DATA_RE = re.compile(
    r'(?:var\s+|window\["|)ytInitialData(?:"\])?\s*=\s*',
)

_CANONICAL_HANDLE_RE = re.compile(
    r'"canonicalChannelUrl"\s*:\s*"(?:https?://www\.youtube\.com)?/(@[^"/]+)"'
)
_HANDLE_URL_RE = re.compile(r"youtube\.com/(@[^\"/?#]+)/?")
_CHANNEL_URL_RE = re.compile(r"youtube\.com/channel/(UC[A-Za-z0-9_-]{22})")
_TITLE_SIMPLE_TEXT_RE = re.compile(
    r'"title"\s*:\s*\{"simpleText"\s*:\s*"([^"]+)"\}'
)
_VERIFIED_RES = (
    re.compile(
        r'"metadataBadgeRenderer"\s*:\s*\{[^}]*"style"\s*:\s*"BADGE_STYLE_TYPE_VERIFIED"',
        re.IGNORECASE,
    ),
    re.compile(r'"tooltip"\s*:\s*"Verified"', re.IGNORECASE),
)
_HIDDEN_SUBSCRIBERS_RE = re.compile(r'"hiddenSubscriberCount"\s*:\s*true')

# JSON keys carrying count phrases, per metric.
_COUNT_KEYS: dict[MetricKind, tuple[str, ...]] = {
    MetricKind.SUBSCRIBERS: ("subscriberCountText",),
    MetricKind.VIEWS: ("viewCountText",),
    MetricKind.VIDEOS: ("videoCountText", "videosCountText"),
}

# Layer 2: JSON key names as labels over the raw source.
STRUCTURED_RULES: dict[MetricKind, LabelRule] = {
    kind: LabelRule(
        metric=kind,
        labels=tuple(f'"{key}"' for key in keys),
        window=160,
        policy=SelectionPolicy.FIRST,
        min_bare_digits=1,
    )
    for kind, keys in _COUNT_KEYS.items()
}

# Layer 3: rendered phrases, number precedes the label.
PHRASE_RULES: dict[MetricKind, LabelRule] = {
    MetricKind.SUBSCRIBERS: LabelRule(
        metric=MetricKind.SUBSCRIBERS,
        labels=(" subscribers", " subscriber"),
        window=24,
        direction=WindowDirection.BEFORE,
        min_bare_digits=1,
    ),
    MetricKind.VIEWS: LabelRule(
        metric=MetricKind.VIEWS,
        labels=(" views",),
        window=32,
        direction=WindowDirection.BEFORE,
        min_bare_digits=1,
    ),
    MetricKind.VIDEOS: LabelRule(
        metric=MetricKind.VIDEOS,
        labels=(" videos", " video"),
        window=24,
        direction=WindowDirection.BEFORE,
        min_bare_digits=1,
    ),
}

# Statistics site: visible-text rules with disambiguation.
STATISTICS_RULES: dict[MetricKind, LabelRule] = {
    MetricKind.SUBSCRIBERS: LabelRule(
        metric=MetricKind.SUBSCRIBERS,
        labels=("subscribers",),
        window=150,
        policy=SelectionPolicy.FIRST,
    ),
    MetricKind.VIEWS: LabelRule(
        metric=MetricKind.VIEWS,
        labels=("video views", "views"),
        window=400,
        policy=SelectionPolicy.MAX,
    ),
    MetricKind.VIDEOS: LabelRule(
        metric=MetricKind.VIDEOS,
        labels=("uploads", "videos"),
        window=400,
        policy=SelectionPolicy.MIN,
        min_bare_digits=1,
    ),
}

ALL_METRICS: frozenset[MetricKind] = frozenset(MetricKind)


def _extract_json_object(html: str, start: int) -> str | None:
    """
    Extract a balanced JSON object from HTML starting at the given position.

    Uses brace-counting to handle arbitrarily nested ``{...}`` structures
    that would break a simple non-greedy regex.

    Parameters
    ----------
    html : str
        Raw HTML source.
    start : int
        Position of the opening ``{`` in the HTML string.

    Returns
    -------
    str | None
        The balanced JSON string, or None if no opening brace at start
        or braces are unbalanced within the first 5MB of text.
    """
    if start >= len(html) or html[start] != "{":
        return None

    depth = 0
    in_string = False
    escape = False
    limit = min(len(html), start + 5_000_000)

    for i in range(start, limit):
        ch = html[i]

        if escape:
            escape = False
            continue

        if ch == "\\":
            if in_string:
                escape = True
            continue

        if ch == '"':
            in_string = not in_string
            continue

        if in_string:
            continue

        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return html[start : i + 1]

    return None


def load_initial_data(html: str) -> dict[str, Any] | None:
    """Parse the embedded ``ytInitialData`` object, or return None."""
    match = _YT_INITIAL_DATA_RE.search(html)
    if not match:
        return None

    json_str = _extract_json_object(html, match.end())
    if not json_str:
        return None

    try:
        data = json.loads(json_str)
    except (json.JSONDecodeError, ValueError):
        logger.debug("Malformed ytInitialData JSON, skipping structured layer")
        return None

    return data if isinstance(data, dict) else None


def _iter_key(node: Any, key: str) -> Iterator[Any]:
    """Yield every value stored under ``key`` in a JSON tree, depth-first."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            for k, v in current.items():
                if k == key:
                    yield v
            stack.extend(reversed(list(current.values())))
        elif isinstance(current, list):
            stack.extend(reversed(current))


def _text_of(value: Any) -> str | None:
    """Flatten a platform text node (plain, simpleText, runs, content)."""
    if isinstance(value, str):
        return value
    if not isinstance(value, dict):
        return None
    if isinstance(value.get("simpleText"), str):
        return value["simpleText"]
    if isinstance(value.get("content"), str):
        return value["content"]
    runs = value.get("runs")
    if isinstance(runs, list):
        return "".join(str(run.get("text", "")) for run in runs if isinstance(run, dict))
    return None


def visible_text(html: str) -> str:
    """Reduce an HTML document to its visible text, one text node per line."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text("\n", strip=True)


class ChannelPageParser:
    """
    Parser for platform channel pages (``/about`` and home).

    Parameters
    ----------
    metrics : Collection[MetricKind], optional
        Metrics this page is trusted for. The home page, for example, lists
        per-video view counts that must not be read as the channel total.

    Examples
    --------
    >>> parser = ChannelPageParser()
    >>> result = parser.parse(html)
    >>> result.subs, result.handle
    (4620000, '@veritasium')
    """

    def __init__(self, metrics: Collection[MetricKind] = ALL_METRICS) -> None:
        self._metrics = frozenset(metrics)

    def parse(self, html: str) -> SourceResult:
        """
        Extract identity and counts from a channel page.

        Parameters
        ----------
        html : str
            Raw page source.

        Returns
        -------
        SourceResult
            Whatever could be extracted; fields default to None.
        """
        data = load_initial_data(html)
        metadata: dict[str, Any] = {}
        metadata_node = data.get("metadata") if data is not None else None
        if isinstance(metadata_node, dict):
            renderer = metadata_node.get("channelMetadataRenderer")
            if isinstance(renderer, dict):
                metadata = renderer

        soup = BeautifulSoup(html, "html.parser")

        counts: dict[str, int | None] = {}
        for kind in MetricKind:
            counts[kind.value] = (
                self._extract_count(html, data, kind) if kind in self._metrics else None
            )

        return SourceResult(
            title=self._extract_title(soup, html, metadata),
            pfp=self._extract_avatar(soup, metadata),
            handle=self._extract_handle(soup, html, metadata),
            channel_id=self._extract_channel_id(soup, metadata),
            verified=any(regex.search(html) for regex in _VERIFIED_RES),
            subscribers_hidden=bool(_HIDDEN_SUBSCRIBERS_RE.search(html)),
            **counts,
        )

    def _extract_count(
        self, html: str, data: dict[str, Any] | None, kind: MetricKind
    ) -> int | None:
        """Run the three count layers for one metric."""
        if data is not None:
            for key in _COUNT_KEYS[kind]:
                for node in _iter_key(data, key):
                    value = parse_count_text(_text_of(node))
                    if value is not None:
                        return value

        value = extract_metric(html, STRUCTURED_RULES[kind])
        if value is not None:
            return value

        return extract_metric(html, PHRASE_RULES[kind])

    @staticmethod
    def _meta_content(soup: BeautifulSoup, **attrs: str) -> str | None:
        tag = soup.find("meta", attrs=attrs)
        if tag is not None and tag.get("content"):
            return str(tag["content"])
        return None

    @staticmethod
    def _link_href(soup: BeautifulSoup, rel: str) -> str | None:
        tag = soup.find("link", rel=rel)
        if tag is not None and tag.get("href"):
            return str(tag["href"])
        return None

    def _extract_title(
        self, soup: BeautifulSoup, html: str, metadata: dict[str, Any]
    ) -> str | None:
        title = self._meta_content(soup, property="og:title")
        if title:
            return title
        if isinstance(metadata.get("title"), str) and metadata["title"]:
            return metadata["title"]
        match = _TITLE_SIMPLE_TEXT_RE.search(html)
        return match.group(1) if match else None

    def _extract_avatar(
        self, soup: BeautifulSoup, metadata: dict[str, Any]
    ) -> str | None:
        avatar = self._link_href(soup, "image_src") or self._meta_content(
            soup, property="og:image"
        )
        if avatar:
            return avatar
        avatar_node = metadata.get("avatar")
        thumbnails = (
            avatar_node.get("thumbnails", []) if isinstance(avatar_node, dict) else []
        )
        if thumbnails and isinstance(thumbnails[0], dict):
            return thumbnails[0].get("url")
        return None

    def _extract_handle(
        self, soup: BeautifulSoup, html: str, metadata: dict[str, Any]
    ) -> str | None:
        match = _CANONICAL_HANDLE_RE.search(html)
        if match:
            return match.group(1)

        for candidate in (
            self._link_href(soup, "canonical"),
            metadata.get("vanityChannelUrl"),
        ):
            if isinstance(candidate, str):
                url_match = _HANDLE_URL_RE.search(candidate)
                if url_match:
                    return url_match.group(1)
        return None

    def _extract_channel_id(
        self, soup: BeautifulSoup, metadata: dict[str, Any]
    ) -> str | None:
        canonical = self._link_href(soup, "canonical")
        if canonical:
            match = _CHANNEL_URL_RE.search(canonical)
            if match:
                return match.group(1)

        for candidate in (
            metadata.get("externalId"),
            self._meta_content(soup, itemprop="identifier"),
            self._meta_content(soup, itemprop="channelId"),
        ):
            if is_channel_id(candidate):
                return candidate
        return None


class StatisticsPageParser:
    """
    Parser for third-party statistics pages.

    Parameters
    ----------
    bounds : PlausibilityBounds | None, optional
        Plausibility limits applied while disambiguating candidates.
    rules : dict[MetricKind, LabelRule] | None, optional
        Overrides for the default extraction rules.
    """

    def __init__(
        self,
        bounds: PlausibilityBounds | None = None,
        rules: dict[MetricKind, LabelRule] | None = None,
    ) -> None:
        self._bounds = bounds or PlausibilityBounds()
        self._rules = {**STATISTICS_RULES, **(rules or {})}

    def parse(self, html: str, known_subscribers: int | None = None) -> SourceResult:
        """
        Extract counts from a statistics page.

        Parameters
        ----------
        html : str
            Raw page source.
        known_subscribers : int | None, optional
            Subscriber count already resolved elsewhere. Used to reject
            view and upload candidates that are really the subscriber figure.

        Returns
        -------
        SourceResult
            Counts only; identity fields stay None.
        """
        text = visible_text(html)

        subs = extract_metric(
            text, self._rules[MetricKind.SUBSCRIBERS], bounds=self._bounds
        )

        reference_subs = known_subscribers if known_subscribers is not None else subs
        exclude = (reference_subs,) if reference_subs is not None else ()

        views = extract_metric(
            text, self._rules[MetricKind.VIEWS], bounds=self._bounds, exclude=exclude
        )
        videos = extract_metric(
            text, self._rules[MetricKind.VIDEOS], bounds=self._bounds, exclude=exclude
        )

        return SourceResult(subs=subs, views=views, videos=videos)
