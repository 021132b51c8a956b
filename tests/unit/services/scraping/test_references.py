"""
Tests for channel reference normalization.
"""

from __future__ import annotations

import pytest

from tubedex.models.enums import ReferenceKind
from tubedex.services.scraping.references import (
    classify_reference,
    dedupe_references,
    is_channel_id,
    is_handle,
    legacy_path,
    normalize_reference,
)

CHANNEL_ID = "UCXuqSBlHAE6Xw-yeJA0Tunw"


class TestNormalizeReference:
    """Test normalize_reference."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("https://www.youtube.com/@LinusTechTips", "@LinusTechTips"),
            ("https://www.youtube.com/@LinusTechTips/videos", "@LinusTechTips"),
            ("https://m.youtube.com/@LinusTechTips?si=abc", "@LinusTechTips"),
            (f"https://youtube.com/channel/{CHANNEL_ID}", CHANNEL_ID),
            (f"https://www.youtube.com/channel/{CHANNEL_ID}/about", CHANNEL_ID),
            ("@LinusTechTips", "@LinusTechTips"),
            (CHANNEL_ID, CHANNEL_ID),
            ("  @padded  ", "@padded"),
            ("veritasium", "veritasium"),
        ],
    )
    def test_canonical_forms(self, raw: str, expected: str) -> None:
        """URLs collapse to IDs or handles; other input is only stripped."""
        assert normalize_reference(raw) == expected

    def test_legacy_url_is_kept_verbatim(self) -> None:
        """A /c/ or /user/ URL is its own canonical form."""
        url = "https://www.youtube.com/c/LinusTechTips"
        assert normalize_reference(url) == url

    def test_empty_input(self) -> None:
        """Empty and None references normalize to an empty string."""
        assert normalize_reference("") == ""
        assert normalize_reference("   ") == ""
        assert normalize_reference(None) == ""

    @pytest.mark.parametrize(
        "raw",
        [
            "https://www.youtube.com/@veritasium/featured",
            f"https://www.youtube.com/channel/{CHANNEL_ID}",
            "https://www.youtube.com/user/bob",
            "@someone",
            "plain name",
        ],
    )
    def test_idempotent(self, raw: str) -> None:
        """Normalizing twice gives the same result as normalizing once."""
        once = normalize_reference(raw)
        assert normalize_reference(once) == once


class TestDedupeReferences:
    """Test dedupe_references."""

    def test_equivalent_urls_collapse(self) -> None:
        """Two URLs for the same handle yield one reference."""
        refs = dedupe_references(
            [
                "https://www.youtube.com/@veritasium",
                "https://www.youtube.com/@veritasium/videos",
                "@veritasium",
            ]
        )
        assert refs == ["@veritasium"]

    def test_order_preserved_and_empties_dropped(self) -> None:
        """First occurrences keep their position; blanks are skipped."""
        refs = dedupe_references(["@b", "", "@a", "  ", "@b", CHANNEL_ID])
        assert refs == ["@b", "@a", CHANNEL_ID]


class TestClassification:
    """Test reference predicates and classification."""

    def test_predicates(self) -> None:
        """Shape predicates reject near misses."""
        assert is_channel_id(CHANNEL_ID)
        assert not is_channel_id(CHANNEL_ID[:-1])
        assert not is_channel_id(None)
        assert is_handle("@veritasium")
        assert not is_handle("veritasium")
        assert not is_handle("@with space")

    @pytest.mark.parametrize(
        "value,kind",
        [
            (CHANNEL_ID, ReferenceKind.CHANNEL_ID),
            ("@veritasium", ReferenceKind.HANDLE),
            ("https://www.youtube.com/c/foo", ReferenceKind.URL),
            ("veritasium", ReferenceKind.NAME),
        ],
    )
    def test_classify(self, value: str, kind: ReferenceKind) -> None:
        """Each canonical shape maps to its kind."""
        assert classify_reference(value) is kind

    def test_legacy_path(self) -> None:
        """Legacy URL shapes are split into segment and name."""
        assert legacy_path("https://www.youtube.com/c/Foo") == ("c", "Foo")
        assert legacy_path("https://www.youtube.com/user/bar/videos") == ("user", "bar")
        assert legacy_path("https://www.youtube.com/@foo") is None
        assert legacy_path("@foo") is None
