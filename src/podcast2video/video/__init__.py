"""Video assembly from a still image and an audio track."""

from podcast2video.video.assembler import FFmpegAssembler, VideoAssembler

__all__ = ["VideoAssembler", "FFmpegAssembler"]
