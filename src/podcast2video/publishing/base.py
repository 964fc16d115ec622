"""Publisher contract shared by every publishing destination."""

import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field


class PublishResult(BaseModel):
    """Where a published video ended up."""

    destination: str = Field(description="Publishing destination (youtube, gcs, ...)")
    video_id: str = Field(description="Identifier of the video at the destination")
    url: str | None = Field(default=None, description="Location of the published video")


class Publisher(Protocol):
    """Publishes a finished video with its metadata.

    Implementations raise PublishError on failure and are expected to stop
    as soon as they can once ``cancel_event`` is set.
    """

    def publish(
        self,
        title: str,
        description: str,
        tags: Sequence[str],
        video_path: Path,
        cancel_event: threading.Event | None = None,
    ) -> PublishResult:
        ...
