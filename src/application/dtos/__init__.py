"""Data Transfer Objects for application layer."""

from src.application.dtos.ingestion import DeleteVideoResponse, ProcessingStep

__all__ = [
    "DeleteVideoResponse",
    "ProcessingStep",
]
