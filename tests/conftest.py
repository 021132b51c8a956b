"""
Pytest configuration and fixtures for tubedex tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tubedex.config.settings import Settings

VERITASIUM_ID = "UCHnyfMqiRRG1u-2MsSQLbXA"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temporary workspace with no pacing delay."""
    return Settings(
        channels_file=tmp_path / "channels.json",
        output_file=tmp_path / "web" / "data.json",
        logs_dir=tmp_path / "logs",
        retry_backoff=0.0,
        fallback_retry_backoff=0.0,
        pacing_base_delay=0.0,
        pacing_jitter=0.0,
    )


@pytest.fixture
def about_page_html() -> str:
    """A trimmed channel /about page with embedded ytInitialData."""
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta property="og:title" content="Veritasium">
  <meta property="og:image" content="https://yt3.ggpht.com/veritasium=s900">
  <link rel="canonical" href="https://www.youtube.com/channel/{VERITASIUM_ID}">
  <meta itemprop="identifier" content="{VERITASIUM_ID}">
</head>
<body>
<script>var ytInitialData = {{"metadata": {{"channelMetadataRenderer": {{
  "title": "Veritasium", "externalId": "{VERITASIUM_ID}",
  "vanityChannelUrl": "http://www.youtube.com/@veritasium"}}}},
  "header": {{"c4TabbedHeaderRenderer": {{
    "badges": [{{"metadataBadgeRenderer": {{"style": "BADGE_STYLE_TYPE_VERIFIED", "tooltip": "Verified"}}}}],
    "subscriberCountText": {{"simpleText": "16.9M subscribers"}},
    "videosCountText": {{"runs": [{{"text": "436"}}, {{"text": " videos"}}]}}}}}},
  "onResponseReceivedEndpoints": [{{"aboutChannelViewModel": {{
    "canonicalChannelUrl": "http://www.youtube.com/@veritasium",
    "viewCountText": "3,412,345,678 views"}}}}]}};</script>
</body>
</html>"""


@pytest.fixture
def statistics_page_html() -> str:
    """A trimmed statistics site page with adjacent, unlabeled numbers."""
    return """<html><body>
<div id="stats">
  <span>Uploads</span> <span>182</span>
  <span>Subscribers</span> <span>45,231</span>
  <span>Video Views</span> <span>1,982,341</span>
</div>
<script>var uploads = 999999;</script>
</body></html>"""


@pytest.fixture
def mixed_format_statistics_html() -> str:
    """A statistics page mixing grouped and suffixed counts."""
    return """<html><body>
<div id="stats">
  <span>Subscribers</span> <span>45,231</span><span>Video Views</span> <span>1.2M</span><span>Uploads</span> <span>182</span>
</div>
</body></html>"""


@pytest.fixture
def adjacent_cells_statistics_html() -> str:
    """A statistics page whose short counts sit in neighbouring cells."""
    return """<html><body>
<table><tr>
  <td>Uploads</td><td>7</td><td>345</td>
  <td>Subscribers</td><td>45,231</td>
  <td>Video Views</td><td>1,982,341</td>
</tr></table>
</body></html>"""
