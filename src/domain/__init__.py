"""Domain layer - business models and logic."""

from src.domain.exceptions import (
    DomainException,
    InvalidEntityIdException,
    InvalidUploadException,
    TranscodeException,
    TranscoderNotAvailableException,
    TranscodeTimeoutException,
    UploadTooLargeException,
)
from src.domain.models import (
    DeletionResult,
    StagedFile,
    TranscodeTarget,
    VideoMetadata,
    round_duration,
)
from src.domain.value_objects import EntityId, StoreObjectKey, source_extension

__all__ = [
    # Exceptions
    "DomainException",
    "InvalidEntityIdException",
    "InvalidUploadException",
    "UploadTooLargeException",
    "TranscodeException",
    "TranscodeTimeoutException",
    "TranscoderNotAvailableException",
    # Models
    "DeletionResult",
    "StagedFile",
    "TranscodeTarget",
    "VideoMetadata",
    "round_duration",
    # Value Objects
    "EntityId",
    "StoreObjectKey",
    "source_extension",
]
