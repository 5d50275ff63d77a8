"""Video upload and removal endpoints."""

from typing import Annotated

from fastapi import APIRouter, File, Path, UploadFile

from src.api.dependencies import IngestionServiceDep, StagingAreaDep
from src.application.dtos.ingestion import DeleteVideoResponse
from src.commons.telemetry import get_logger
from src.domain.exceptions import InvalidUploadException
from src.domain.models.video import VideoMetadata
from src.domain.value_objects import EntityId

router = APIRouter()
logger = get_logger(__name__)

EntityIdPath = Annotated[
    str,
    Path(description="Identifier of the content unit the video belongs to"),
]


@router.post(
    "/{entity_id}/video",
    response_model=VideoMetadata,
    summary="Upload a video",
    description=(
        "Accept a multipart upload in the `file` field, store the original "
        "in the raw bucket, transcode it to HLS and return playable metadata."
    ),
    responses={
        400: {"description": "Missing file or malformed identifier"},
        413: {"description": "Upload exceeds the configured size limit"},
        500: {"description": "Store upload or transcoding failed"},
    },
)
async def upload_video(
    entity_id: EntityIdPath,
    service: IngestionServiceDep,
    staging: StagingAreaDep,
    file: Annotated[UploadFile | None, File(description="Video file")] = None,
) -> VideoMetadata:
    """Ingest one uploaded video for an entity."""
    eid = EntityId.parse(entity_id)
    if file is None or not file.filename:
        raise InvalidUploadException("No video file provided")

    try:
        staged = await staging.stage(eid, file, file.filename)
    finally:
        await file.close()

    logger.info(
        "Processing upload",
        extra={
            "entity_id": eid.value,
            "original_filename": file.filename,
            "mime_type": file.content_type,
            "size_bytes": staged.size_bytes,
        },
    )
    return await service.ingest(eid, staged.path, file.filename, file.content_type)


@router.delete(
    "/{entity_id}/video",
    response_model=DeleteVideoResponse,
    summary="Delete a video",
    description="Remove the stored source objects and HLS output of an entity.",
    responses={
        400: {"description": "Malformed identifier"},
        500: {"description": "Removal failed"},
    },
)
async def delete_video(
    entity_id: EntityIdPath,
    service: IngestionServiceDep,
) -> DeleteVideoResponse:
    """Delete all video artifacts of an entity."""
    result = await service.delete(EntityId.parse(entity_id))
    return DeleteVideoResponse(
        objects_removed=result.objects_removed,
        hls_removed=result.hls_removed,
    )
