"""Core utilities: ffprobe probing and the ffmpeg runner."""

from .ffmpeg_utils import (
    EncodedArtifact,
    EncoderTimeoutError,
    EncodingError,
    EncodingListener,
    EncodingProgress,
    FFmpegRunner,
    ffmpeg_available,
    parse_progress_block,
)
from .video_info import probe_duration

__all__ = [
    "EncodedArtifact",
    "EncoderTimeoutError",
    "EncodingError",
    "EncodingListener",
    "EncodingProgress",
    "FFmpegRunner",
    "ffmpeg_available",
    "parse_progress_block",
    "probe_duration",
]
