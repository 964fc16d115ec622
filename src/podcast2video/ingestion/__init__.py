"""Podcast ingestion module for feed lookup and audio downloading."""

from podcast2video.ingestion.audio_downloader import AudioDownloader
from podcast2video.ingestion.feed_locator import Episode, FeedLocator

__all__ = ["FeedLocator", "Episode", "AudioDownloader"]
