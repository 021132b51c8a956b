"""
Tests for page fetching and the retry utility.

All tests use mocked httpx responses and never make real HTTP calls.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from tubedex.exceptions import FetchError
from tubedex.services.scraping.http import PageFetcher, fetch_with_retry
from tubedex.services.scraping.models import RetryPolicy

# Mark all tests in this module as async by default
pytestmark = pytest.mark.asyncio

URL = "https://www.youtube.com/@veritasium/about"


@pytest.fixture
def fetcher(test_settings) -> PageFetcher:
    return PageFetcher.from_settings(test_settings)


class TestPageFetcher:
    """Test PageFetcher.fetch_text."""

    async def test_returns_body_text(self, fetcher: PageFetcher) -> None:
        """A 200 response yields its body."""
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = httpx.Response(status_code=200, text="<html>ok</html>")

            html = await fetcher.fetch_text(URL)

        assert html == "<html>ok</html>"
        assert str(mock_get.call_args[0][0]) == URL

    async def test_sends_identity_headers(self, fetcher: PageFetcher) -> None:
        """Default headers are sent and per-request headers merged over them."""
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = httpx.Response(status_code=200, text="")

            await fetcher.fetch_text(URL, extra_headers={"Referer": "https://socialblade.com/"})

        headers = mock_get.call_args.kwargs["headers"]
        assert "Chrome/124" in headers["User-Agent"]
        assert headers["Accept-Language"] == "en-US,en;q=0.9"
        assert headers["Accept"] == "text/html,*/*"
        assert headers["Cookie"] == "CONSENT=YES+1"
        assert headers["Referer"] == "https://socialblade.com/"

    async def test_non_success_status_raises(self, fetcher: PageFetcher) -> None:
        """Non-2xx responses are failures carrying the status code."""
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = httpx.Response(status_code=404, text="Not Found")

            with pytest.raises(FetchError) as exc_info:
                await fetcher.fetch_text(URL)

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL

    async def test_transport_error_raises(self, fetcher: PageFetcher) -> None:
        """Transport errors are failures with status 0."""
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = httpx.ConnectError("connection refused")

            with pytest.raises(FetchError) as exc_info:
                await fetcher.fetch_text(URL)

        assert exc_info.value.status_code == 0


class TestFetchWithRetry:
    """Test fetch_with_retry."""

    async def test_succeeds_after_failures(self, fetcher: PageFetcher) -> None:
        """Failures are retried with linear back-off until one succeeds."""
        responses = [
            httpx.Response(status_code=503, text="Service Unavailable"),
            httpx.Response(status_code=429, text="Too Many Requests"),
            httpx.Response(status_code=200, text="<html>third time</html>"),
        ]
        policy = RetryPolicy(max_attempts=3, base_delay=0.8)

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get, patch(
            "asyncio.sleep"
        ) as mock_sleep:
            mock_get.side_effect = responses

            html = await fetch_with_retry(fetcher, URL, policy)

        assert html == "<html>third time</html>"
        assert mock_get.call_count == 3
        sleep_calls = [call[0][0] for call in mock_sleep.call_args_list]
        assert sleep_calls == [pytest.approx(0.8), pytest.approx(1.6)]

    async def test_gives_up_after_max_attempts(self) -> None:
        """After the last attempt the failure propagates without a final sleep."""
        stub = MagicMock()
        stub.fetch_text = AsyncMock(
            side_effect=FetchError("boom", url=URL, status_code=500)
        )
        policy = RetryPolicy(max_attempts=2, base_delay=1.2)

        with patch("asyncio.sleep") as mock_sleep:
            with pytest.raises(FetchError) as exc_info:
                await fetch_with_retry(stub, URL, policy)

        assert stub.fetch_text.await_count == 2
        assert mock_sleep.call_count == 1
        assert exc_info.value.retry_count == 2
        assert exc_info.value.status_code == 500

    async def test_single_attempt_never_sleeps(self) -> None:
        """A one-attempt policy fails immediately."""
        stub = MagicMock()
        stub.fetch_text = AsyncMock(side_effect=FetchError("boom", url=URL))

        with patch("asyncio.sleep") as mock_sleep:
            with pytest.raises(FetchError):
                await fetch_with_retry(stub, URL, RetryPolicy(max_attempts=1))

        mock_sleep.assert_not_called()
