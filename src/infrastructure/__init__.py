"""Infrastructure layer - external service implementations."""

from src.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from src.infrastructure.video import (
    FFmpegHLSTranscoder,
    HLSProfile,
    TranscoderBase,
    parse_duration,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    "get_factory",
    "reset_factory",
    # Video
    "TranscoderBase",
    "HLSProfile",
    "FFmpegHLSTranscoder",
    "parse_duration",
]
