"""
Metric extraction grammar.

Pulls numeric counts out of semi-structured page text with a small,
network-free grammar:

1. **Label** - locate a known label (case-insensitive) for the metric.
2. **Window** - cut a fixed-size slice of text after (or before) the label.
3. **Candidates** - scan the window for numeric tokens. Token classes in
   priority order: number with a magnitude suffix (``4.62M``), grouped
   integer (``1,234,567`` or ``1 234 567``), bare digit run (``322``).
4. **Selection** - pick one candidate: ``first`` (nearest the label, token
   class breaking ties), ``min`` or ``max``, after dropping implausible
   values and values equal to an already-known count.

Functions
---------
parse_count
    Convert one numeric token to an integer.
parse_count_text
    Convert a platform count phrase (``"4.62M subscribers"``) to an integer.
scan_candidates
    Tokenize a window into MetricCandidate objects.
extract_candidates
    Label lookup plus window scan.
select_candidate
    Apply a selection policy to a candidate list.
extract_metric
    The full grammar: text and rule in, integer or None out.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Collection, Iterable

from tubedex.models.enums import (
    MetricKind,
    SelectionPolicy,
    TokenPattern,
    WindowDirection,
)
from tubedex.services.scraping.models import (
    LabelRule,
    MetricCandidate,
    PlausibilityBounds,
)

_MAGNITUDES: dict[str, int] = {
    "K": 1_000,
    "M": 1_000_000,
    "B": 1_000_000_000,
}

_MAX_PLAIN_DIGITS = 15

# Separators stripped before parsing: comma, whitespace, NBSP, narrow NBSP.
_SEPARATOR_RE = re.compile(r"[,\s\u00a0\u202f]")
_COUNT_RE = re.compile(r"^(\d+(?:\.\d+)?)([KMB])?$")
_COUNT_TEXT_STRIP_RE = re.compile(r"[^0-9KMB.,]")

# Alternation order encodes token priority at each scan position.
# Group separators exclude line breaks.
_TOKEN_RE = re.compile(
    r"(?P<suffixed>\d+(?:\.\d+)?[ \u00a0]?[KMB])(?![A-Za-z])"
    r"|(?P<grouped>\d{1,3}(?:[, \u00a0\u202f]\d{3})+)(?![\d.])"
    r"|(?P<bare>\d+(?:\.\d+)?)",
    re.IGNORECASE,
)

_PATTERN_PRIORITY: dict[TokenPattern, int] = {
    TokenPattern.SUFFIXED: 0,
    TokenPattern.GROUPED: 1,
    TokenPattern.BARE: 2,
}


def parse_count(token: str | None) -> int | None:
    """
    Convert a numeric token to an integer.

    Separators (commas and spaces) are stripped; a trailing ``K``, ``M`` or
    ``B`` multiplies by 10^3, 10^6 or 10^9. The result is rounded half-up.

    Parameters
    ----------
    token : str | None
        Token text, e.g. ``"4.62M"``, ``"1,234,567"``, ``"12K"``, ``"322"``.

    Returns
    -------
    int | None
        Parsed value, or ``None`` if the token is not a count.

    Examples
    --------
    >>> parse_count("4.62M")
    4620000
    >>> parse_count("1,234,567")
    1234567
    >>> parse_count("12K")
    12000
    >>> parse_count("322")
    322
    """
    if token is None:
        return None

    cleaned = _SEPARATOR_RE.sub("", str(token)).upper()
    match = _COUNT_RE.match(cleaned)
    if not match:
        return None

    number, suffix = match.groups()
    if suffix is None and "." not in number and len(number) > _MAX_PLAIN_DIGITS:
        return None

    try:
        value = Decimal(number) * _MAGNITUDES.get(suffix or "", 1)
    except InvalidOperation:
        return None
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def parse_count_text(text: str | None) -> int | None:
    """
    Parse a platform count phrase such as ``"4.62M subscribers"``.

    Every character other than digits, ``K``, ``M``, ``B``, ``.`` and ``,``
    is dropped before parsing. Phrases starting with "No" (``"No videos"``)
    mean zero.

    Examples
    --------
    >>> parse_count_text("4.62M subscribers")
    4620000
    >>> parse_count_text("1,234 videos")
    1234
    >>> parse_count_text("No videos")
    0
    """
    if not text or not text.strip():
        return None

    if text.strip().lower().startswith("no "):
        return 0

    return parse_count(_COUNT_TEXT_STRIP_RE.sub("", text).strip("."))


def scan_candidates(
    window: str, min_bare_digits: int = 2, offset_base: int = 0
) -> list[MetricCandidate]:
    """
    Tokenize a text window into numeric candidates.

    Parameters
    ----------
    window : str
        Text to scan.
    min_bare_digits : int, optional
        Unseparated digit runs shorter than this are ignored (default: 2).
    offset_base : int, optional
        Added to each token's position to express offsets relative to the
        label (default: 0).

    Returns
    -------
    list[MetricCandidate]
        Candidates in window order.
    """
    candidates: list[MetricCandidate] = []
    for match in _TOKEN_RE.finditer(window):
        kind = TokenPattern(match.lastgroup)
        token = match.group(0)

        if kind is TokenPattern.BARE:
            # Unsuffixed decimals are ratios or versions, not counts
            if "." in token or len(token) < min_bare_digits:
                continue

        value = parse_count(token)
        if value is None:
            continue

        candidates.append(
            MetricCandidate(
                value=value,
                token=token,
                pattern=kind,
                offset=offset_base + match.start(),
            )
        )
    return candidates


def extract_candidates(text: str, rule: LabelRule) -> list[MetricCandidate]:
    """
    Find the rule's label in ``text`` and scan the adjoining window.

    Labels are tried in order; the first label present whose window holds
    at least one candidate wins. Only the first occurrence of each label is
    considered.

    Parameters
    ----------
    text : str
        Page text (rendered text or raw markup).
    rule : LabelRule
        The extraction rule.

    Returns
    -------
    list[MetricCandidate]
        Candidates from the winning window, or an empty list.
    """
    if not text:
        return []

    for label in rule.labels:
        match = re.search(re.escape(label), text, re.IGNORECASE)
        if match is None:
            continue

        if rule.direction is WindowDirection.AFTER:
            start = match.end()
            window = text[start : start + rule.window]
            offset_base = start - match.start()
        else:
            start = max(0, match.start() - rule.window)
            window = text[start : match.start()]
            offset_base = start - match.start()

        candidates = scan_candidates(
            window,
            min_bare_digits=rule.min_bare_digits,
            offset_base=offset_base,
        )
        if candidates:
            return candidates

    return []


def select_candidate(
    candidates: Iterable[MetricCandidate],
    policy: SelectionPolicy,
    metric: MetricKind,
    bounds: PlausibilityBounds | None = None,
    exclude: Collection[int] = (),
) -> int | None:
    """
    Choose one value from ``candidates``.

    Candidates equal to a value in ``exclude`` are always dropped. ``first``
    takes the candidate closest to the label and checks plausibility
    afterwards, rejecting the value as a whole so the caller falls through
    to its next source. For ``min`` and ``max`` implausible candidates are
    dropped before choosing.

    Parameters
    ----------
    candidates : Iterable[MetricCandidate]
        Candidates from one window.
    policy : SelectionPolicy
        ``first``, ``min`` or ``max``.
    metric : MetricKind
        Metric being selected, used for plausibility checks.
    bounds : PlausibilityBounds | None, optional
        Accepted ranges; ``None`` disables the check (default: None).
    exclude : Collection[int], optional
        Values known to belong to another metric (default: ()).

    Returns
    -------
    int | None
        Selected value, or ``None`` when nothing qualifies.
    """
    pool = [c for c in candidates if c.value not in exclude]

    if policy is SelectionPolicy.FIRST:
        if not pool:
            return None
        best = min(
            pool, key=lambda c: (abs(c.offset), _PATTERN_PRIORITY[c.pattern])
        )
        if bounds is not None and not bounds.accepts(metric, best.value):
            return None
        return best.value

    if bounds is not None:
        pool = [c for c in pool if bounds.accepts(metric, c.value)]
    if not pool:
        return None

    if policy is SelectionPolicy.MIN:
        return min(c.value for c in pool)
    return max(c.value for c in pool)


def extract_metric(
    text: str,
    rule: LabelRule,
    bounds: PlausibilityBounds | None = None,
    exclude: Collection[int] = (),
) -> int | None:
    """
    Run the full label -> window -> candidates -> selection grammar.

    Examples
    --------
    >>> rule = LabelRule(metric=MetricKind.VIDEOS, labels=("uploads",),
    ...                  policy=SelectionPolicy.MIN)
    >>> extract_metric("Uploads 182 Subscribers 45,231 Views 1,982,341", rule)
    182
    """
    candidates = extract_candidates(text, rule)
    return select_candidate(
        candidates, rule.policy, rule.metric, bounds=bounds, exclude=exclude
    )
