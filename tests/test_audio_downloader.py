"""Tests for AudioDownloader."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from podcast2video.errors import FetchError
from podcast2video.ingestion.audio_downloader import AudioDownloader

AUDIO_URL = "https://example.com/media/ep5.mp3"


def _make_mock_response(chunks: list[bytes] | None = None):
    """Create a mock streaming response context manager."""
    if chunks is None:
        chunks = [b"fake-audio-chunk-1", b"fake-audio-chunk-2"]

    response = MagicMock()
    response.raise_for_status = MagicMock()
    response.iter_bytes.return_value = iter(chunks)

    stream_cm = MagicMock()
    stream_cm.__enter__ = MagicMock(return_value=response)
    stream_cm.__exit__ = MagicMock(return_value=False)
    return stream_cm


def _make_mock_client(stream_cm):
    """Create a mock httpx.Client context manager."""
    mock_client = MagicMock()
    mock_client.stream.return_value = stream_cm
    client_cm = MagicMock()
    client_cm.__enter__ = MagicMock(return_value=mock_client)
    client_cm.__exit__ = MagicMock(return_value=False)
    return client_cm


class TestAudioDownloaderInit:
    """Tests for AudioDownloader initialization."""

    def test_defaults(self):
        dl = AudioDownloader()
        assert dl.timeout == 300
        assert dl.chunk_size == 8192

    def test_custom_params(self):
        dl = AudioDownloader(timeout_seconds=60, chunk_size=4096)
        assert dl.timeout == 60
        assert dl.chunk_size == 4096


class TestFilenameFor:
    """Tests for deriving local filenames."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            (AUDIO_URL, "audio.mp3"),
            ("https://example.com/a%20b.M4A?token=1", "audio.m4a"),
            ("https://example.com/", "audio.mp3"),
            ("https://example.com", "audio.mp3"),
            ("https://example.com/media/vid.mp4", "audio.mp4"),
            ("https://example.com/slide.png", "audio.png"),
            ("https://example.com/..", "audio.mp3"),
            ("https://example.com/%2E%2E%2Fslide.png", "audio.png"),
            ("https://example.com/episode.m p3", "audio.mp3"),
        ],
    )
    def test_filename(self, url, expected):
        assert AudioDownloader.filename_for(url) == expected


class TestDownload:
    """Tests for the download method."""

    @patch("podcast2video.ingestion.audio_downloader.httpx.Client")
    def test_download_to_dir(self, mock_httpx_client, tmp_path):
        """Download writes audio bytes into the destination directory."""
        mock_httpx_client.return_value = _make_mock_client(_make_mock_response())

        result = AudioDownloader().download(AUDIO_URL, tmp_path)

        assert result == tmp_path / "audio.mp3"
        assert result.read_bytes() == b"fake-audio-chunk-1fake-audio-chunk-2"

    @patch("podcast2video.ingestion.audio_downloader.httpx.Client")
    def test_http_error_raises_fetch_error(self, mock_httpx_client, tmp_path):
        mock_client = MagicMock()
        mock_client.stream.side_effect = httpx.HTTPError("connection failed")
        client_cm = MagicMock()
        client_cm.__enter__ = MagicMock(return_value=mock_client)
        client_cm.__exit__ = MagicMock(return_value=False)
        mock_httpx_client.return_value = client_cm

        with pytest.raises(FetchError, match="connection failed") as exc_info:
            AudioDownloader().download(AUDIO_URL, tmp_path)

        assert exc_info.value.source == AUDIO_URL
        assert list(tmp_path.iterdir()) == []

    @patch("podcast2video.ingestion.audio_downloader.httpx.Client")
    def test_failure_mid_stream_removes_partial_file(self, mock_httpx_client, tmp_path):
        """A connection dropped mid-download leaves no partial file."""

        def chunks():
            yield b"first-chunk"
            raise httpx.ReadError("connection reset")

        stream_cm = _make_mock_response()
        stream_cm.__enter__.return_value.iter_bytes.return_value = chunks()
        mock_httpx_client.return_value = _make_mock_client(stream_cm)

        with pytest.raises(FetchError, match="connection reset"):
            AudioDownloader().download(AUDIO_URL, tmp_path)

        assert not (tmp_path / "audio.mp3").exists()


class TestDownloadFile:
    """Tests for the _download_file internal method."""

    @patch("podcast2video.ingestion.audio_downloader.httpx.Client")
    def test_creates_parent_dirs(self, mock_httpx_client, tmp_path):
        """_download_file creates parent directories if needed."""
        stream_cm = _make_mock_response()
        mock_httpx_client.return_value = _make_mock_client(stream_cm)

        dl = AudioDownloader()
        dest = tmp_path / "sub" / "dir" / "file.mp3"
        dl._download_file("https://example.com/file.mp3", dest)

        assert dest.exists()
        assert dest.read_bytes() == b"fake-audio-chunk-1fake-audio-chunk-2"

    @patch("podcast2video.ingestion.audio_downloader.httpx.Client")
    def test_uses_configured_timeout_and_chunk_size(self, mock_httpx_client, tmp_path):
        """Verifies timeout and chunk_size are passed through."""
        stream_cm = _make_mock_response()
        mock_httpx_client.return_value = _make_mock_client(stream_cm)

        dl = AudioDownloader(timeout_seconds=60, chunk_size=1024)
        dl._download_file("https://example.com/file.mp3", tmp_path / "file.mp3")

        mock_httpx_client.assert_called_once_with(timeout=60, follow_redirects=True)
        response = stream_cm.__enter__.return_value
        response.iter_bytes.assert_called_once_with(chunk_size=1024)
