"""Domain models."""

from src.domain.models.video import (
    DeletionResult,
    StagedFile,
    TranscodeTarget,
    VideoMetadata,
    round_duration,
)

__all__ = [
    "DeletionResult",
    "StagedFile",
    "TranscodeTarget",
    "VideoMetadata",
    "round_duration",
]
