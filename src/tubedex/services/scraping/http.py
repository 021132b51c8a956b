"""
HTTP page fetching with bounded retries.

Classes
-------
PageFetcher
    Async GET of a page with the fixed browser-like header set.

Functions
---------
fetch_with_retry
    Run a fetch under a RetryPolicy, sleeping between attempts.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping

import httpx

from tubedex.config.settings import Settings
from tubedex.exceptions import FetchError
from tubedex.services.scraping.models import RetryPolicy

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 30.0


class PageFetcher:
    """
    Fetches page text over HTTP.

    Every request carries the configured identity headers (user agent,
    language preference, accept header and consent cookie). Redirects are
    followed. Non-2xx responses and transport errors raise ``FetchError``.

    Parameters
    ----------
    headers : Mapping[str, str]
        Headers sent with every request.
    timeout : float, optional
        Per-request timeout in seconds (default: 30.0).

    Examples
    --------
    >>> fetcher = PageFetcher.from_settings(settings)
    >>> html = await fetcher.fetch_text("https://www.youtube.com/@veritasium/about")
    """

    def __init__(
        self,
        headers: Mapping[str, str],
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._headers = dict(headers)
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "PageFetcher":
        """Build a fetcher from application settings."""
        return cls(headers=settings.request_headers, timeout=settings.request_timeout)

    @property
    def headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        return dict(self._headers)

    async def fetch_text(
        self, url: str, extra_headers: Mapping[str, str] | None = None
    ) -> str:
        """
        GET ``url`` and return the response body as text.

        Parameters
        ----------
        url : str
            Absolute URL to fetch.
        extra_headers : Mapping[str, str] | None, optional
            Headers merged over the defaults for this request only.

        Returns
        -------
        str
            Decoded response body.

        Raises
        ------
        FetchError
            On a transport error or a non-2xx response.
        """
        headers = {**self._headers, **(extra_headers or {})}
        try:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.get(
                    url,
                    headers=headers,
                    timeout=self._timeout,
                )
        except httpx.HTTPError as e:
            raise FetchError(
                message=f"Request to {url} failed: {type(e).__name__}",
                url=url,
                status_code=0,
            ) from e

        if not response.is_success:
            raise FetchError(
                message=(
                    f"Request to {url} returned {response.status_code} "
                    f"{response.reason_phrase}"
                ),
                url=url,
                status_code=response.status_code,
            )

        return response.text


async def fetch_with_retry(
    fetcher: PageFetcher,
    url: str,
    policy: RetryPolicy,
    extra_headers: Mapping[str, str] | None = None,
) -> str:
    """
    Fetch ``url``, retrying transport and status failures.

    Waits ``policy.delay_for(attempt)`` seconds after each failed attempt
    except the last.

    Parameters
    ----------
    fetcher : PageFetcher
        The fetcher to use.
    url : str
        Absolute URL to fetch.
    policy : RetryPolicy
        Attempt budget and back-off schedule.
    extra_headers : Mapping[str, str] | None, optional
        Per-request headers.

    Returns
    -------
    str
        Page text from the first successful attempt.

    Raises
    ------
    FetchError
        When every attempt failed. ``retry_count`` holds the attempts made.
    """
    last_error: FetchError | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await fetcher.fetch_text(url, extra_headers=extra_headers)
        except FetchError as e:
            last_error = e
            if attempt >= policy.max_attempts:
                break
            delay = policy.delay_for(attempt)
            logger.warning(
                "Fetch attempt %d/%d for %s failed (%s), retrying in %.1fs",
                attempt,
                policy.max_attempts,
                url,
                e.message,
                delay,
            )
            await asyncio.sleep(delay)

    raise FetchError(
        message=(
            f"Giving up on {url} after {policy.max_attempts} attempt(s): "
            f"{last_error.message if last_error else 'unknown error'}"
        ),
        url=url,
        status_code=last_error.status_code if last_error else 0,
        retry_count=policy.max_attempts,
    ) from last_error
