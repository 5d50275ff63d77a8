"""Application services for video ingestion and management."""

from src.application.services.ingestion import (
    IngestionError,
    VideoIngestionService,
)
from src.application.services.staging import StagingArea

__all__ = [
    "IngestionError",
    "StagingArea",
    "VideoIngestionService",
]
