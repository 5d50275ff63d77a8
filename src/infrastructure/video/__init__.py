"""Video processing services."""

from src.infrastructure.video.base import HLSProfile, TranscoderBase
from src.infrastructure.video.ffmpeg_transcoder import (
    FFmpegHLSTranscoder,
    parse_duration,
)

__all__ = [
    # Base classes
    "HLSProfile",
    "TranscoderBase",
    # Implementations
    "FFmpegHLSTranscoder",
    "parse_duration",
]
