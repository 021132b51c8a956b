"""
Tests for channel page and statistics page parsers.

Page fixtures are trimmed HTML documents; no network access is involved.
"""

from __future__ import annotations

from tubedex.models.enums import MetricKind
from tubedex.services.scraping.page_parser import (
    ChannelPageParser,
    StatisticsPageParser,
    load_initial_data,
    visible_text,
)

VERITASIUM_ID = "UCHnyfMqiRRG1u-2MsSQLbXA"


class TestLoadInitialData:
    """Test extraction of the embedded JSON blob."""

    def test_parses_nested_object(self, about_page_html: str) -> None:
        """Nested braces and strings containing braces are handled."""
        data = load_initial_data(about_page_html)

        assert data is not None
        assert data["metadata"]["channelMetadataRenderer"]["title"] == "Veritasium"

    def test_string_braces(self) -> None:
        """Braces inside JSON strings do not end the object early."""
        html = 'var ytInitialData = {"a": "}{", "b": {"c": 1}};'
        assert load_initial_data(html) == {"a": "}{", "b": {"c": 1}}

    def test_missing_or_malformed(self) -> None:
        """Absent or broken blobs yield None."""
        assert load_initial_data("<html></html>") is None
        assert load_initial_data('var ytInitialData = {"a": };') is None
        assert load_initial_data('var ytInitialData = {"a": 1') is None


class TestChannelPageParser:
    """Test ChannelPageParser."""

    def test_about_page(self, about_page_html: str) -> None:
        """Identity and all three counts come from the about page."""
        result = ChannelPageParser().parse(about_page_html)

        assert result.title == "Veritasium"
        assert result.pfp == "https://yt3.ggpht.com/veritasium=s900"
        assert result.handle == "@veritasium"
        assert result.channel_id == VERITASIUM_ID
        assert result.verified is True
        assert result.subscribers_hidden is False
        assert result.subs == 16_900_000
        assert result.videos == 436
        assert result.views == 3_412_345_678

    def test_restricted_metrics(self, about_page_html: str) -> None:
        """Metrics the page is not trusted for stay None."""
        parser = ChannelPageParser(metrics={MetricKind.SUBSCRIBERS, MetricKind.VIDEOS})
        result = parser.parse(about_page_html)

        assert result.views is None
        assert result.subs == 16_900_000

    def test_rendered_phrases_fallback(self) -> None:
        """Without embedded JSON, counts are read from rendered phrases."""
        html = (
            "<html><body><span>1.2K subscribers</span>"
            "<span>45 videos</span><span>12,345 views</span></body></html>"
        )
        result = ChannelPageParser().parse(html)

        assert result.subs == 1_200
        assert result.videos == 45
        assert result.views == 12_345
        assert result.title is None
        assert result.has_data

    def test_json_keys_as_labels(self) -> None:
        """A broken JSON blob still yields counts through its key names."""
        html = (
            '<script>var ytInitialData = {"header": {'
            '"subscriberCountText": {"simpleText": "2.5M subscribers"}, '
            '"videosCountText": {"simpleText": "1,024 videos"},;</script>'
        )
        result = ChannelPageParser().parse(html)

        assert result.subs == 2_500_000
        assert result.videos == 1_024

    def test_hidden_subscribers(self) -> None:
        """The hidden-count marker is reported and no count is invented."""
        html = (
            '<html><head><meta property="og:title" content="Quiet Channel"></head>'
            '<body><script>var ytInitialData = {"header": {'
            '"hiddenSubscriberCount": true}};</script></body></html>'
        )
        result = ChannelPageParser().parse(html)

        assert result.subscribers_hidden is True
        assert result.subs is None
        assert result.title == "Quiet Channel"
        assert result.verified is False

    def test_handle_from_canonical_link(self) -> None:
        """The canonical link supplies the handle when the JSON does not."""
        html = (
            '<html><head><link rel="canonical" '
            'href="https://www.youtube.com/@SomeHandle"></head></html>'
        )
        assert ChannelPageParser().parse(html).handle == "@SomeHandle"

    def test_empty_page(self) -> None:
        """A page with nothing recognizable has no data."""
        assert not ChannelPageParser().parse("<html><body>Sign in</body></html>").has_data


class TestStatisticsPageParser:
    """Test StatisticsPageParser."""

    def test_visible_text_drops_scripts(self, statistics_page_html: str) -> None:
        """Script content never reaches the text grammar."""
        text = visible_text(statistics_page_html)

        assert "999999" not in text
        assert "Uploads\n182" in text

    def test_disambiguates_adjacent_numbers(self, statistics_page_html: str) -> None:
        """Uploads take the smallest plausible value, views the largest."""
        result = StatisticsPageParser().parse(statistics_page_html)

        assert result.subs == 45_231
        assert result.videos == 182
        assert result.views == 1_982_341
        assert result.title is None

    def test_known_subscribers_excluded(self, statistics_page_html: str) -> None:
        """A value equal to the known subscriber count is never an upload count."""
        result = StatisticsPageParser().parse(
            statistics_page_html, known_subscribers=182
        )

        assert result.videos == 45_231
        assert result.views == 1_982_341

    def test_mixed_formats_keep_adjacent_subscriber_count(
        self, mixed_format_statistics_html: str
    ) -> None:
        """A suffixed view count after the subscriber count never replaces it."""
        result = StatisticsPageParser().parse(mixed_format_statistics_html)

        assert result.subs == 45_231
        assert result.views == 1_200_000
        assert result.videos == 182

    def test_adjacent_cells_are_not_merged(
        self, adjacent_cells_statistics_html: str
    ) -> None:
        """Neighbouring cells stay separate numbers; a single-digit count survives."""
        result = StatisticsPageParser().parse(adjacent_cells_statistics_html)

        assert result.videos == 7
        assert result.subs == 45_231
        assert result.views == 1_982_341

    def test_two_digit_cells_are_not_grouped(self) -> None:
        """'12' and '345' in separate spans never read as 12,345."""
        html = (
            "<span>Uploads</span> <span>12</span> <span>345</span>"
            "<span>Subscribers</span> <span>45,231</span>"
        )
        result = StatisticsPageParser().parse(html)

        assert result.videos == 12
        assert result.subs == 45_231

    def test_visible_text_separates_text_nodes(self) -> None:
        """Each text node lands on its own line."""
        assert visible_text("<td>12</td><td>345</td>") == "12\n345"
