"""Publishing destinations for finished videos."""

from podcast2video.config import PublishSettings
from podcast2video.errors import PublishError
from podcast2video.publishing.base import Publisher, PublishResult


def build_publisher(settings: PublishSettings) -> Publisher:
    """Create the publisher for the configured destination.

    Client libraries are only imported for the selected destination.
    """
    if settings.destination == "gcs":
        if not settings.gcs_bucket:
            raise PublishError("PUBLISH_GCS_BUCKET must be set to publish to gcs")

        from podcast2video.publishing.gcs import GCSPublisher

        return GCSPublisher(
            bucket_name=settings.gcs_bucket,
            project_id=settings.gcs_project_id,
            prefix=settings.gcs_prefix,
        )

    from podcast2video.publishing.youtube import YouTubePublisher

    return YouTubePublisher(
        credentials_file=settings.youtube_credentials_file,
        token_file=settings.youtube_token_file,
        category_id=settings.youtube_category_id,
        privacy_status=settings.youtube_privacy_status,
    )


__all__ = ["Publisher", "PublishResult", "build_publisher"]
