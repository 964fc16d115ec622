"""Episode-to-video pipeline.

Runs feed lookup, confirmation, title card rendering, video assembly,
metadata derivation and publishing in order inside a private workspace
that is removed however the run ends.
"""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import structlog

from podcast2video.config import Settings
from podcast2video.errors import Podcast2VideoError, PublishError
from podcast2video.ingestion import AudioDownloader, Episode, FeedLocator
from podcast2video.pipeline.metadata import derive_metadata
from podcast2video.pipeline.workspace import Workspace
from podcast2video.publishing import Publisher, PublishResult, build_publisher
from podcast2video.rendering import load_logo, render_title_card, save_png
from podcast2video.video import FFmpegAssembler, VideoAssembler

logger = structlog.get_logger(__name__)

SLIDE_FILENAME = "slide.png"
VIDEO_FILENAME = "vid.mp4"

ConfirmCallback = Callable[[Episode], bool]


def _always_confirm(episode: Episode) -> bool:
    return True


class Pipeline:
    """Turns one feed episode into a published video."""

    def __init__(
        self,
        settings: Settings,
        *,
        locator: FeedLocator | None = None,
        assembler: VideoAssembler | None = None,
        publisher: Publisher | None = None,
        downloader: AudioDownloader | None = None,
        confirm: ConfirmCallback | None = None,
        workspace_factory: Callable[[], Workspace] = Workspace,
    ) -> None:
        """Initialize the pipeline.

        Collaborators default to the ones described by ``settings``; pass
        them explicitly to swap an implementation.

        Args:
            settings: Application settings.
            locator: Feed locator.
            assembler: Video assembler.
            publisher: Publishing destination. Built from settings on first
                use when omitted.
            downloader: Audio downloader, used when audio prefetch is on.
            confirm: Called with the located episode; returning False
                stops the run before anything is rendered.
            workspace_factory: Creates the run's workspace.
        """
        self.settings = settings
        self.locator = locator or FeedLocator(
            ordinal_field=settings.feed.ordinal_field,
            timeout_seconds=settings.feed.timeout_seconds,
        )
        self.assembler = assembler or FFmpegAssembler(
            ffmpeg_binary=settings.video.ffmpeg_binary,
            video_codec=settings.video.video_codec,
            audio_codec=settings.video.audio_codec,
            audio_bitrate=settings.video.audio_bitrate,
            timeout_seconds=settings.video.timeout_seconds,
        )
        self.downloader = downloader or AudioDownloader()
        self.confirm = confirm or _always_confirm
        self.workspace_factory = workspace_factory
        self._publisher = publisher
        self.logger = logger.bind(component="pipeline")

    @property
    def publisher(self) -> Publisher:
        if self._publisher is None:
            self._publisher = build_publisher(self.settings.publish)
        return self._publisher

    def run(
        self, episode_number: int, cancel_event: threading.Event | None = None
    ) -> PublishResult | None:
        """Publish the episode with the given number.

        Args:
            episode_number: Number of the episode in the feed.
            cancel_event: Handed to the publisher, which stops when it is set.

        Returns:
            The publish result, or None if the confirmation was declined.

        Raises:
            Podcast2VideoError: The first failure, tagged with its stage.
        """
        with structlog.contextvars.bound_contextvars(episode=episode_number):
            workspace = self.workspace_factory()
            with self._stage("workspace"):
                workspace.acquire()
            try:
                return self._run(episode_number, workspace, cancel_event)
            finally:
                workspace.release()

    def _run(
        self,
        episode_number: int,
        workspace: Workspace,
        cancel_event: threading.Event | None,
    ) -> PublishResult | None:
        card = self.settings.card

        with self._stage("feed_lookup"):
            episode = self.locator.locate_episode(self.settings.feed.url, episode_number)

        if not self.confirm(episode):
            self.logger.info("Publishing declined", title=episode.title)
            return None

        with self._stage("render"):
            logo = load_logo(card.logo_path)
            image = render_title_card(
                logo,
                episode.card_text,
                card.fg_color,
                card.bg_color,
                card.width,
                card.height,
                font_path=card.font_path,
            )
            slide = save_png(image, workspace.path / SLIDE_FILENAME)

        audio_source = episode.audio_url
        if self.settings.video.download_audio:
            with self._stage("download"):
                audio_source = str(self.downloader.download(episode.audio_url, workspace.path))

        with self._stage("assemble"):
            video = self.assembler.assemble_video(
                slide, audio_source, workspace.path / VIDEO_FILENAME
            )

        with self._stage("metadata"):
            metadata = derive_metadata(
                episode,
                self.settings.publish.title_template,
                self.settings.publish.extra_tags,
            )

        with self._stage("publish"):
            try:
                result = self.publisher.publish(
                    metadata.title,
                    metadata.description,
                    metadata.tags,
                    video,
                    cancel_event=cancel_event,
                )
            except Podcast2VideoError:
                raise
            except Exception as e:
                raise PublishError(f"could not publish {video.name}: {e}") from e

        self.logger.info(
            "Published episode",
            title=metadata.title,
            destination=result.destination,
            url=result.url,
        )
        return result

    @contextmanager
    def _stage(self, stage: str) -> Iterator[None]:
        """Tag errors raised inside the block with the stage name."""
        with structlog.contextvars.bound_contextvars(stage=stage):
            self.logger.debug("Stage started")
            try:
                yield
            except Podcast2VideoError as e:
                if e.stage is None:
                    e.stage = stage
                self.logger.error("Stage failed", error=e.message)
                raise
