"""
Tests for directory view helpers.
"""

from __future__ import annotations

import pytest

from tubedex.models.enums import SortKey
from tubedex.services.directory_view import (
    filter_channels,
    format_count,
    sort_channels,
    subscriber_cell,
)
from tests.factories.channel_record_factory import (
    ChannelRecordFactory,
    HiddenSubscribersRecordFactory,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, "—"),
        (0, "0"),
        (999, "999"),
        (1_000, "1.0K"),
        (12_000, "12.0K"),
        (45_231, "45.2K"),
        (4_620_000, "4.62M"),
        (3_412_345_678, "3412.35M"),
    ],
)
def test_format_count(value, expected: str) -> None:
    """Counts are abbreviated above a thousand."""
    assert format_count(value) == expected


def test_subscriber_cell() -> None:
    """Hidden counts read 'Hidden'; others are formatted."""
    assert subscriber_cell(HiddenSubscribersRecordFactory.build()) == "Hidden"
    assert subscriber_cell(ChannelRecordFactory.build(subs=12_000)) == "12.0K"


class TestFilterChannels:
    """Test filter_channels."""

    @pytest.fixture
    def channels(self):
        return [
            ChannelRecordFactory.build(title="Linus Tech Tips", handle="@LinusTechTips"),
            ChannelRecordFactory.build(title="Veritasium", handle="@veritasium"),
            ChannelRecordFactory.build(title="Kurzgesagt", handle="@kurzgesagt"),
        ]

    def test_matches_title_case_insensitive(self, channels) -> None:
        """Titles match regardless of case."""
        assert [c.title for c in filter_channels(channels, "TECH")] == ["Linus Tech Tips"]

    def test_matches_handle(self, channels) -> None:
        """Handles are searched too."""
        assert [c.title for c in filter_channels(channels, "@kurz")] == ["Kurzgesagt"]

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_blank_query_keeps_all(self, channels, query) -> None:
        """A blank query keeps every record."""
        assert len(filter_channels(channels, query)) == 3


class TestSortChannels:
    """Test sort_channels."""

    @pytest.fixture
    def channels(self):
        return [
            ChannelRecordFactory.build(title="beta", subs=500, views=9_000, videos=3),
            HiddenSubscribersRecordFactory.build(title="Alpha", views=1_000, videos=50),
            ChannelRecordFactory.build(title="Gamma", subs=2_000, views=None, videos=10),
        ]

    def test_default_is_subscribers_descending(self, channels) -> None:
        """Missing counts sort as zero."""
        assert [c.title for c in sort_channels(channels)] == ["Gamma", "beta", "Alpha"]

    def test_name_defaults_ascending(self, channels) -> None:
        """Names sort ascending and ignore case."""
        assert [c.title for c in sort_channels(channels, SortKey.NAME)] == [
            "Alpha",
            "beta",
            "Gamma",
        ]

    def test_explicit_direction(self, channels) -> None:
        """An explicit direction overrides the column default."""
        assert [c.title for c in sort_channels(channels, SortKey.VIDEOS, descending=False)] == [
            "beta",
            "Gamma",
            "Alpha",
        ]
        assert [c.title for c in sort_channels(channels, SortKey.NAME, descending=True)] == [
            "Gamma",
            "beta",
            "Alpha",
        ]

    def test_views(self, channels) -> None:
        """Views sort descending by default."""
        assert [c.title for c in sort_channels(channels, SortKey.VIEWS)] == [
            "beta",
            "Alpha",
            "Gamma",
        ]
