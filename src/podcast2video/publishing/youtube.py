"""YouTube publisher using the YouTube Data API v3.

Authenticates with an installed-app OAuth flow, caches the token as JSON
and uploads the video as a resumable upload.
"""

import threading
from collections.abc import Sequence
from pathlib import Path

import structlog
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from podcast2video.errors import PublishError
from podcast2video.publishing.base import PublishResult

logger = structlog.get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/youtube.upload"]
UPLOAD_CHUNK_SIZE = 8 * 1024 * 1024


class YouTubePublisher:
    """Uploads videos to a YouTube channel."""

    def __init__(
        self,
        credentials_file: str = "client_secret.json",
        token_file: str = "token.json",
        category_id: str = "28",
        privacy_status: str = "public",
    ) -> None:
        """Initialize the publisher.

        Args:
            credentials_file: OAuth client secrets downloaded from the Cloud Console.
            token_file: Where the authorized user token is cached.
            category_id: YouTube category of uploaded videos.
            privacy_status: public, unlisted or private.
        """
        self.credentials_file = credentials_file
        self.token_file = token_file
        self.category_id = category_id
        self.privacy_status = privacy_status
        self._service = None
        self.logger = logger.bind(component="youtube_publisher")

    @property
    def service(self):
        """Lazy-initialize the YouTube API client."""
        if self._service is None:
            self._service = build(
                "youtube", "v3", credentials=self._credentials(), cache_discovery=False
            )
        return self._service

    def _credentials(self) -> Credentials:
        """Load the cached token, refreshing or re-authorizing as needed."""
        token_path = Path(self.token_file)
        creds = None
        if token_path.exists():
            creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)

        if creds and creds.valid:
            return creds

        if creds and creds.expired and creds.refresh_token:
            self.logger.info("Refreshing YouTube token")
            creds.refresh(Request())
        else:
            if not Path(self.credentials_file).exists():
                raise PublishError(f"OAuth client secrets not found: {self.credentials_file}")
            flow = InstalledAppFlow.from_client_secrets_file(self.credentials_file, SCOPES)
            creds = flow.run_local_server(port=0)

        token_path.write_text(creds.to_json())
        return creds

    def publish(
        self,
        title: str,
        description: str,
        tags: Sequence[str],
        video_path: Path,
        cancel_event: threading.Event | None = None,
    ) -> PublishResult:
        """Upload a video.

        Raises:
            PublishError: If authentication or the upload fails, or the
                upload is cancelled between chunks.
        """
        body = {
            "snippet": {
                "title": title,
                "description": description,
                "tags": list(tags),
                "categoryId": self.category_id,
            },
            "status": {
                "privacyStatus": self.privacy_status,
                "selfDeclaredMadeForKids": False,
            },
        }

        self.logger.info("Uploading to YouTube", title=title, file=str(video_path))

        try:
            media = MediaFileUpload(
                str(video_path), mimetype="video/mp4", chunksize=UPLOAD_CHUNK_SIZE, resumable=True
            )
            request = self.service.videos().insert(
                part=",".join(body.keys()), body=body, media_body=media
            )

            response = None
            while response is None:
                if cancel_event is not None and cancel_event.is_set():
                    raise PublishError("upload cancelled")
                status, response = request.next_chunk()
                if status:
                    self.logger.info("Upload progress", percent=int(status.progress() * 100))
        except (HttpError, GoogleAuthError, OSError) as e:
            raise PublishError(f"could not upload to YouTube: {e}") from e

        video_id = response["id"]
        url = f"https://www.youtube.com/watch?v={video_id}"
        self.logger.info("Uploaded to YouTube", video_id=video_id, url=url)
        return PublishResult(destination="youtube", video_id=video_id, url=url)
