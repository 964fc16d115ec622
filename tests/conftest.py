"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest
from PIL import Image

from podcast2video.config import FeedSettings, PublishSettings, Settings, TitleCardSettings

SAMPLE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test Podcast</title>
    <link>http://x/</link>
    <description>A feed for tests</description>
    <item>
      <title>Test</title>
      <order>5</order>
      <guid>http://x/5</guid>
      <description><![CDATA[<p>Hi</p>]]></description>
      <enclosure url="http://x/5.mp3" length="1234" type="audio/mpeg"/>
      <category>a</category>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def sample_feed_xml() -> str:
    """A feed with a single episode numbered 5."""
    return SAMPLE_FEED


@pytest.fixture
def feed_file(tmp_path: Path, sample_feed_xml: str) -> Path:
    """The sample feed written to disk."""
    path = tmp_path / "feed.xml"
    path.write_text(sample_feed_xml, encoding="utf-8")
    return path


@pytest.fixture
def logo_image() -> Image.Image:
    """A solid red 64x32 logo."""
    return Image.new("RGBA", (64, 32), (255, 0, 0, 255))


@pytest.fixture
def logo_file(tmp_path: Path, logo_image: Image.Image) -> Path:
    """The logo saved as PNG."""
    path = tmp_path / "logo.png"
    logo_image.save(path, format="PNG")
    return path


@pytest.fixture
def settings(feed_file: Path, logo_file: Path) -> Settings:
    """Settings pointing at the local sample feed and logo."""
    return Settings(
        feed=FeedSettings(url=str(feed_file)),
        card=TitleCardSettings(logo_path=logo_file, width=320, height=200),
        publish=PublishSettings(
            title_template="%s: GCPPodcast %d",
            extra_tags=["gcppodcast", "podcast"],
        ),
    )
