"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from podcast2video.config import (
    FeedSettings,
    PublishSettings,
    Settings,
    TitleCardSettings,
    VideoSettings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run each test without a stray .env file or overrides."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "FEED_URL",
        "CARD_WIDTH",
        "CARD_BG_COLOR",
        "VIDEO_DOWNLOAD_AUDIO",
        "PUBLISH_DESTINATION",
        "PUBLISH_TITLE_TEMPLATE",
        "PUBLISH_EXTRA_TAGS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Tests for default values."""

    def test_feed(self):
        feed = FeedSettings()
        assert feed.url == "http://feeds.feedburner.com/GcpPodcast?format=xml"
        assert feed.ordinal_field == "order"

    def test_card(self):
        card = TitleCardSettings()
        assert card.logo_path == Path("logo.png")
        assert (card.fg_color, card.bg_color) == ("ffffff", "009688")
        assert (card.width, card.height) == (1200, 800)
        assert card.font_path is None

    def test_video(self):
        video = VideoSettings()
        assert video.ffmpeg_binary == "ffmpeg"
        assert video.download_audio is False

    def test_publish(self):
        publish = PublishSettings()
        assert publish.destination == "youtube"
        assert publish.title_template == "%s: GCPPodcast %d"
        assert publish.extra_tags == ["gcppodcast", "podcast"]
        assert publish.youtube_category_id == "28"
        assert publish.gcs_bucket is None

    def test_settings_groups(self):
        settings = Settings()
        assert settings.log_level == "INFO"
        assert settings.card.width == 1200
        assert settings.publish.destination == "youtube"


class TestEnvironment:
    """Tests for environment overrides."""

    def test_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("FEED_URL", "https://example.com/feed.xml")
        monkeypatch.setenv("CARD_WIDTH", "640")
        monkeypatch.setenv("CARD_BG_COLOR", "000000")
        monkeypatch.setenv("VIDEO_DOWNLOAD_AUDIO", "true")
        monkeypatch.setenv("PUBLISH_DESTINATION", "gcs")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings()

        assert settings.feed.url == "https://example.com/feed.xml"
        assert settings.card.width == 640
        assert settings.card.bg_color == "000000"
        assert settings.video.download_audio is True
        assert settings.publish.destination == "gcs"
        assert settings.log_level == "DEBUG"

    def test_tags_from_json(self, monkeypatch):
        monkeypatch.setenv("PUBLISH_EXTRA_TAGS", '["cloud", "ml"]')
        assert PublishSettings().extra_tags == ["cloud", "ml"]

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("LOG_LEVEL=WARNING\n")
        assert Settings().log_level == "WARNING"

    def test_unknown_destination(self, monkeypatch):
        monkeypatch.setenv("PUBLISH_DESTINATION", "vimeo")
        with pytest.raises(ValidationError):
            PublishSettings()


class TestTitleTemplate:
    """Tests for title template validation."""

    def test_valid(self):
        assert PublishSettings(title_template="%s: Ep %d").title_template == "%s: Ep %d"

    @pytest.mark.parametrize("template", ["%d: %s", "%s", "%s %d %d", "%q"])
    def test_invalid(self, template):
        with pytest.raises(ValidationError, match="title template"):
            PublishSettings(title_template=template)
