"""Application layer - use cases and orchestration.

This layer contains:
- Services: ingestion pipeline and upload staging
- DTOs: Data transfer objects for API boundaries
"""

from src.application.dtos import DeleteVideoResponse, ProcessingStep
from src.application.services import (
    IngestionError,
    StagingArea,
    VideoIngestionService,
)

__all__ = [
    # DTOs
    "DeleteVideoResponse",
    "ProcessingStep",
    # Services
    "IngestionError",
    "StagingArea",
    "VideoIngestionService",
]
