"""Audio downloader for fetching an episode's audio into the workspace.

Used when the encoder should read a local copy instead of streaming the
remote file itself.
"""

from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
import structlog

from podcast2video.errors import FetchError

logger = structlog.get_logger(__name__)


class AudioDownloader:
    """Downloads podcast audio files to a local directory."""

    def __init__(self, timeout_seconds: int = 300, chunk_size: int = 8192) -> None:
        """Initialize the audio downloader.

        Args:
            timeout_seconds: HTTP request timeout.
            chunk_size: Chunk size for streaming downloads.
        """
        self.timeout = timeout_seconds
        self.chunk_size = chunk_size
        self.logger = logger.bind(component="audio_downloader")

    def download(self, url: str, dest_dir: Path) -> Path:
        """Download an audio file.

        Args:
            url: URL of the audio file.
            dest_dir: Directory the file is written to.

        Returns:
            Path of the downloaded file.

        Raises:
            FetchError: If the download fails. No partial file is left behind.
        """
        dest_path = dest_dir / self.filename_for(url)
        self.logger.info("Downloading audio", url=url, dest=str(dest_path))

        try:
            self._download_file(url, dest_path)
        except (httpx.HTTPError, OSError) as e:
            dest_path.unlink(missing_ok=True)
            raise FetchError(url, e) from e

        self.logger.info(
            "Downloaded audio",
            url=url,
            size_mb=round(dest_path.stat().st_size / (1024 * 1024), 2),
        )
        return dest_path

    @staticmethod
    def filename_for(url: str) -> str:
        """Local filename for an audio URL: ``audio`` plus the URL's extension."""
        suffix = Path(unquote(urlparse(url).path)).suffix
        if not suffix[1:].isalnum():
            suffix = ".mp3"
        return f"audio{suffix.lower()}"

    def _download_file(self, url: str, dest_path: Path) -> None:
        """Stream download a file to disk."""
        dest_path.parent.mkdir(parents=True, exist_ok=True)

        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            with client.stream("GET", url) as response:
                response.raise_for_status()

                with open(dest_path, "wb") as f:
                    for chunk in response.iter_bytes(chunk_size=self.chunk_size):
                        f.write(chunk)
