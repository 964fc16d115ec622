"""Still-image video assembly with ffmpeg.

The title card is looped for the length of the audio and muxed with it
into an H.264/AAC MP4.
"""

import subprocess
from pathlib import Path
from typing import Protocol

import structlog

from podcast2video.errors import EncodingError

logger = structlog.get_logger(__name__)


class VideoAssembler(Protocol):
    """Anything that can turn a still image and an audio track into a video."""

    def assemble_video(self, image_path: Path, audio_source: str, output_path: Path) -> Path:
        ...


class FFmpegAssembler:
    """Assembles videos by running the ffmpeg command line tool."""

    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        video_codec: str = "libx264",
        audio_codec: str = "aac",
        audio_bitrate: str = "192k",
        timeout_seconds: int | None = None,
    ) -> None:
        self.ffmpeg_binary = ffmpeg_binary
        self.video_codec = video_codec
        self.audio_codec = audio_codec
        self.audio_bitrate = audio_bitrate
        self.timeout = timeout_seconds
        self.logger = logger.bind(component="ffmpeg_assembler")

    def build_command(self, image_path: Path, audio_source: str, output_path: Path) -> list[str]:
        """ffmpeg arguments for one still image plus one audio track."""
        cmd = [
            self.ffmpeg_binary,
            "-y",
            "-loglevel", "error",
            "-loop", "1",
            "-framerate", "2",
            "-i", str(image_path),
            "-i", str(audio_source),
            "-c:v", self.video_codec,
        ]
        if self.video_codec == "libx264":
            cmd += ["-tune", "stillimage"]
        cmd += [
            "-pix_fmt", "yuv420p",
            # yuv420p needs even dimensions
            "-vf", "scale=trunc(iw/2)*2:trunc(ih/2)*2",
            "-c:a", self.audio_codec,
            "-b:a", self.audio_bitrate,
            "-shortest",
            "-movflags", "+faststart",
            str(output_path),
        ]
        return cmd

    def assemble_video(self, image_path: Path, audio_source: str, output_path: Path) -> Path:
        """Encode the video.

        Args:
            image_path: Still image shown for the whole video.
            audio_source: Local path or URL of the audio track.
            output_path: Where the video is written.

        Returns:
            ``output_path``, once ffmpeg has written a non-empty file there.

        Raises:
            EncodingError: If ffmpeg is missing, fails or times out. Any
                partial output is removed.
        """
        output_path = Path(output_path)
        cmd = self.build_command(Path(image_path), audio_source, output_path)
        self.logger.info("Encoding video", image=str(image_path), audio=audio_source)

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout, check=False
            )
        except FileNotFoundError as e:
            raise EncodingError(f"ffmpeg not found: {self.ffmpeg_binary}") from e
        except subprocess.TimeoutExpired as e:
            output_path.unlink(missing_ok=True)
            raise EncodingError(f"ffmpeg timed out after {self.timeout}s") from e
        except OSError as e:
            raise EncodingError(f"could not run {self.ffmpeg_binary}: {e}") from e

        if result.returncode != 0:
            output_path.unlink(missing_ok=True)
            raise EncodingError(f"ffmpeg exited with status {result.returncode}", result.stderr)

        if not output_path.exists() or output_path.stat().st_size == 0:
            output_path.unlink(missing_ok=True)
            raise EncodingError(f"ffmpeg produced no output at {output_path}", result.stderr)

        self.logger.info(
            "Encoded video",
            output=str(output_path),
            size_mb=round(output_path.stat().st_size / (1024 * 1024), 2),
        )
        return output_path
