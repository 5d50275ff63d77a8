"""DTOs for video ingestion operations."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProcessingStep(str, Enum):
    """Individual steps in the ingestion pipeline."""

    UPLOADING_SOURCE = "uploading_source"
    TRANSCODING = "transcoding"
    CLEANING_UP = "cleaning_up"
    DELETING = "deleting"


class DeleteVideoResponse(BaseModel):
    """Response from removing an entity's video artifacts."""

    model_config = ConfigDict(populate_by_name=True)

    deleted: bool = Field(default=True, description="Always true on success")
    objects_removed: int = Field(
        alias="objectsRemoved",
        ge=0,
        description="Number of stored source objects removed",
    )
    hls_removed: bool = Field(
        alias="hlsRemoved",
        description="Whether an HLS output directory existed and was removed",
    )
