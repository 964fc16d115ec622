"""Central configuration management using pydantic-settings.

All configuration is loaded from environment variables with sensible defaults.
Create a .env file for local development.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeedSettings(BaseSettings):
    """Podcast feed configuration."""

    model_config = SettingsConfigDict(env_prefix="FEED_")

    url: str = Field(
        default="http://feeds.feedburner.com/GcpPodcast?format=xml",
        description="URL (or local path) of the RSS feed",
    )
    ordinal_field: str = Field(
        default="order", description="Item element holding the episode number"
    )
    timeout_seconds: int = Field(default=30, description="HTTP timeout for the feed request")


class TitleCardSettings(BaseSettings):
    """Title card rendering configuration."""

    model_config = SettingsConfigDict(env_prefix="CARD_")

    logo_path: Path = Field(default=Path("logo.png"), description="Path to the PNG logo image")
    fg_color: str = Field(default="ffffff", description="Hex encoded color for the text")
    bg_color: str = Field(default="009688", description="Hex encoded color for the background")
    width: int = Field(default=1200, description="Width of the generated video in pixels")
    height: int = Field(default=800, description="Height of the generated video in pixels")
    font_path: str | None = Field(
        default=None, description="TrueType font file (Pillow's bundled font if unset)"
    )


class VideoSettings(BaseSettings):
    """ffmpeg encoding configuration."""

    model_config = SettingsConfigDict(env_prefix="VIDEO_")

    ffmpeg_binary: str = Field(default="ffmpeg", description="ffmpeg executable")
    video_codec: str = Field(default="libx264", description="Video codec")
    audio_codec: str = Field(default="aac", description="Audio codec")
    audio_bitrate: str = Field(default="192k", description="Audio bitrate")
    timeout_seconds: int | None = Field(default=None, description="Encoder timeout")
    download_audio: bool = Field(
        default=False, description="Download the audio before encoding instead of streaming it"
    )


class PublishSettings(BaseSettings):
    """Publishing destination and metadata configuration."""

    model_config = SettingsConfigDict(env_prefix="PUBLISH_")

    destination: Literal["youtube", "gcs"] = Field(
        default="youtube", description="Where the video is published"
    )
    title_template: str = Field(
        default="%s: GCPPodcast %d", description="Template for the title (episode title, number)"
    )
    extra_tags: list[str] = Field(
        default=["gcppodcast", "podcast"], description="Tags appended to every video"
    )

    # YouTube
    youtube_credentials_file: str = Field(
        default="client_secret.json", description="OAuth client secrets file"
    )
    youtube_token_file: str = Field(default="token.json", description="Cached OAuth token")
    youtube_category_id: str = Field(default="28", description="YouTube category (Science & Tech)")
    youtube_privacy_status: Literal["public", "unlisted", "private"] = Field(
        default="public", description="Privacy status of uploaded videos"
    )

    # Google Cloud Storage
    gcs_bucket: str | None = Field(default=None, description="Bucket for published videos")
    gcs_project_id: str | None = Field(default=None, description="GCP project ID")
    gcs_prefix: str = Field(default="videos", description="Object prefix for published videos")

    @field_validator("title_template")
    @classmethod
    def _check_title_template(cls, value: str) -> str:
        try:
            value % ("title", 1)
        except (TypeError, ValueError) as e:
            raise ValueError(f"title template must take a title and a number: {e}") from e
        return value


class Settings(BaseSettings):
    """Main application settings aggregating all config sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    json_logs: bool = Field(default=False, description="Emit JSON logs instead of console output")

    # Sub-configurations
    feed: FeedSettings = Field(default_factory=FeedSettings)
    card: TitleCardSettings = Field(default_factory=TitleCardSettings)
    video: VideoSettings = Field(default_factory=VideoSettings)
    publish: PublishSettings = Field(default_factory=PublishSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings loaded from environment.
    """
    return Settings()
