"""Google Cloud Storage publisher.

Publishes a video as an object in a bucket next to a JSON sidecar with
its title, description and tags.
"""

import json
import re
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog
from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage

from podcast2video.errors import PublishError
from podcast2video.publishing.base import PublishResult

logger = structlog.get_logger(__name__)


def make_slug(title: str) -> str:
    """URL-safe object name for a video title."""
    slug = re.sub(r"[^a-zA-Z0-9]+", "-", title)[:60].strip("-").lower()
    return slug or "episode"


class GCSPublisher:
    """Publishes videos to a Google Cloud Storage bucket."""

    def __init__(
        self, bucket_name: str, project_id: str | None = None, prefix: str = "videos"
    ) -> None:
        """Initialize the publisher.

        Args:
            bucket_name: Name of the GCS bucket to use.
            project_id: GCP project ID (uses default if None).
            prefix: Object prefix published videos are stored under.
        """
        self.bucket_name = bucket_name
        self.project_id = project_id
        self.prefix = prefix.strip("/")
        self._client: storage.Client | None = None
        self._bucket: storage.Bucket | None = None
        self.logger = logger.bind(component="gcs_publisher", bucket=bucket_name)

    @property
    def client(self) -> storage.Client:
        """Lazy-initialize the storage client."""
        if self._client is None:
            self._client = storage.Client(project=self.project_id)
        return self._client

    @property
    def bucket(self) -> storage.Bucket:
        """Get the configured bucket."""
        if self._bucket is None:
            self._bucket = self.client.bucket(self.bucket_name)
        return self._bucket

    def get_uri(self, blob_path: str) -> str:
        """Full GCS URI (gs://bucket/path) for a blob path."""
        return f"gs://{self.bucket_name}/{blob_path}"

    def upload_file(
        self,
        local_path: Path,
        blob_path: str,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Upload a local file, returning its GCS URI."""
        blob = self.bucket.blob(blob_path)

        if metadata:
            blob.metadata = metadata

        self.logger.info("Uploading file", local=str(local_path), blob=blob_path)
        blob.upload_from_filename(str(local_path), content_type=content_type)

        return self.get_uri(blob_path)

    def upload_json(self, data: dict[str, Any], blob_path: str) -> str:
        """Upload JSON data, returning its GCS URI."""
        blob = self.bucket.blob(blob_path)

        self.logger.info("Uploading JSON", blob=blob_path)
        blob.upload_from_string(json.dumps(data, indent=2), content_type="application/json")

        return self.get_uri(blob_path)

    def publish(
        self,
        title: str,
        description: str,
        tags: Sequence[str],
        video_path: Path,
        cancel_event: threading.Event | None = None,
    ) -> PublishResult:
        """Upload the video and its metadata sidecar.

        Raises:
            PublishError: If an upload fails or the publish is cancelled.
        """
        base = f"{self.prefix}/{make_slug(title)}" if self.prefix else make_slug(title)
        video_blob = f"{base}.mp4"

        try:
            self._check_cancelled(cancel_event)
            uri = self.upload_file(
                Path(video_path), video_blob, content_type="video/mp4", metadata={"title": title}
            )
            self._check_cancelled(cancel_event)
            self.upload_json(
                {"title": title, "description": description, "tags": list(tags), "video": uri},
                f"{base}.json",
            )
        except (GoogleAPIError, OSError) as e:
            raise PublishError(f"could not upload to {self.get_uri(video_blob)}: {e}") from e

        self.logger.info("Published video", uri=uri)
        return PublishResult(destination="gcs", video_id=video_blob, url=uri)

    @staticmethod
    def _check_cancelled(cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise PublishError("upload cancelled")
