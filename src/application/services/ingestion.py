"""Video ingestion orchestration service."""

import asyncio
import shutil
from pathlib import Path

from src.application.dtos.ingestion import ProcessingStep
from src.commons.infrastructure.blob.base import BlobStorageBase
from src.commons.settings.models import Settings
from src.commons.telemetry import LogContext, get_logger
from src.domain.models.video import (
    DeletionResult,
    TranscodeTarget,
    VideoMetadata,
    round_duration,
)
from src.domain.exceptions import TranscodeException
from src.domain.value_objects import EntityId, StoreObjectKey
from src.infrastructure.video.base import TranscoderBase

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _as_entity_id(entity_id: EntityId | str) -> EntityId:
    if isinstance(entity_id, EntityId):
        return entity_id
    return EntityId.parse(entity_id)


class IngestionError(Exception):
    """Raised when a pipeline step fails; ``step`` tells which one."""

    def __init__(self, message: str, step: ProcessingStep) -> None:
        self.step = step
        super().__init__(message)


class VideoIngestionService:
    """Orchestrates the video ingestion pipeline for one uploaded file.

    Pipeline steps (single attempt each, no retries):
    1. Build the store key ``<entity-kind>/<entityId>/source<ext>``
    2. Upload the staged file to the raw-videos bucket
    3. Ensure the HLS output directory exists
    4. Transcode the staged file to HLS
    5. Delete the staged file, whatever happened above
    6. Return the playable metadata

    A source object uploaded in step 2 is left in place when step 4 fails.
    """

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        transcoder: TranscoderBase,
        settings: Settings,
    ) -> None:
        """Initialize the service.

        Args:
            blob_storage: Store receiving the original upload.
            transcoder: HLS transcoder.
            settings: Application settings.
        """
        self._blob = blob_storage
        self._transcoder = transcoder
        self._settings = settings
        self._logger = get_logger(__name__)

        self._bucket = settings.blob_storage.buckets.raw_videos
        self._entity_kind = settings.ingestion.entity_kind
        self._provider_tag = settings.ingestion.provider_tag
        self._keep_staged_on_failure = settings.ingestion.keep_staged_on_failure
        self._hls_root = Path(settings.storage.hls_output_dir)
        self._public_base_url = settings.storage.hls_public_url
        self._manifest_name = settings.transcoding.manifest_name

    def target_for(self, entity_id: EntityId) -> TranscodeTarget:
        """Output location and public URL of an entity's HLS rendition."""
        return TranscodeTarget.for_entity(
            hls_root=self._hls_root,
            public_base_url=self._public_base_url,
            entity_kind=self._entity_kind,
            entity_id=entity_id,
            manifest_name=self._manifest_name,
        )

    async def ingest(
        self,
        entity_id: EntityId | str,
        staged_path: Path,
        original_filename: str,
        mime_type: str | None,
    ) -> VideoMetadata:
        """Publish a staged upload and return its playable metadata.

        Args:
            entity_id: Content unit the video belongs to.
            staged_path: Local copy of the upload. Owned by this call and
                removed before it returns.
            original_filename: Client-side filename, used for the extension.
            mime_type: Declared MIME type of the upload.

        Returns:
            Metadata with the store key, manifest URL and rounded duration.

        Raises:
            InvalidEntityIdException: If ``entity_id`` is malformed.
            IngestionError: If the store upload or the transcode fails.
        """
        succeeded = False
        try:
            eid = _as_entity_id(entity_id)
            with LogContext(entity_id=eid.value):
                metadata = await self._run_pipeline(
                    eid, staged_path, original_filename, mime_type
                )
            succeeded = True
            return metadata
        finally:
            self._cleanup_staged(staged_path, failed=not succeeded)

    async def _run_pipeline(
        self,
        entity_id: EntityId,
        staged_path: Path,
        original_filename: str,
        mime_type: str | None,
    ) -> VideoMetadata:
        object_key = StoreObjectKey.for_upload(
            self._entity_kind, entity_id, original_filename
        )

        self._logger.info(
            "Uploading source to blob storage",
            extra={"bucket": self._bucket, "object_key": object_key.value},
        )
        try:
            await self._blob.upload_file(
                self._bucket,
                object_key.value,
                staged_path,
                content_type=mime_type or DEFAULT_CONTENT_TYPE,
            )
        except Exception as e:
            self._logger.error(
                "Source upload failed",
                extra={"object_key": object_key.value, "error": str(e)},
            )
            raise IngestionError(str(e), ProcessingStep.UPLOADING_SOURCE) from e

        target = self.target_for(entity_id)
        try:
            target.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._logger.error(
                "Could not create HLS output directory",
                extra={"directory": str(target.directory), "error": str(e)},
            )
            raise IngestionError(str(e), ProcessingStep.TRANSCODING) from e

        self._logger.info(
            "Starting HLS transcoding",
            extra={"manifest_path": str(target.manifest_path)},
        )
        try:
            duration = await self._transcoder.transcode(
                staged_path, target.manifest_path
            )
        except Exception as e:
            # The uploaded source stays in the bucket; reconciliation is external.
            self._logger.error(
                "Transcoding failed",
                extra={"object_key": object_key.value, "error": str(e)},
            )
            # Clients get the reason only; the staging path stays in the logs
            message = e.reason if isinstance(e, TranscodeException) else str(e)
            raise IngestionError(message, ProcessingStep.TRANSCODING) from e

        metadata = VideoMetadata(
            video_provider=self._provider_tag,
            video_object_key=object_key.value,
            video_hls_url=target.public_url,
            duration_sec=round_duration(duration),
        )
        self._logger.info(
            "Video ingested",
            extra={
                "object_key": metadata.video_object_key,
                "hls_url": metadata.video_hls_url,
                "duration_sec": metadata.duration_sec,
            },
        )
        return metadata

    def _cleanup_staged(self, staged_path: Path, *, failed: bool) -> None:
        """Remove the staged upload. Errors are logged, never raised."""
        if failed and self._keep_staged_on_failure:
            self._logger.warning(
                "Keeping staged file after failed ingest",
                extra={"staged_path": str(staged_path)},
            )
            return
        try:
            staged_path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.warning(
                "Failed to delete staged file",
                extra={
                    "staged_path": str(staged_path),
                    "step": ProcessingStep.CLEANING_UP.value,
                    "error": str(e),
                },
            )

    async def delete(self, entity_id: EntityId | str) -> DeletionResult:
        """Remove the stored source objects and HLS output of an entity.

        Both removals are attempted even if the first one fails.

        Raises:
            InvalidEntityIdException: If ``entity_id`` is malformed.
            IngestionError: If either removal fails.
        """
        eid = _as_entity_id(entity_id)
        prefix = f"{self._entity_kind}/{eid.value}/"
        target = self.target_for(eid)
        errors: list[str] = []

        with LogContext(entity_id=eid.value):
            hls_removed = False
            try:
                hls_removed = await self._remove_directory(target.directory)
            except OSError as e:
                self._logger.error(
                    "Could not remove HLS output",
                    extra={"directory": str(target.directory), "error": str(e)},
                )
                errors.append(str(e))

            objects_removed = 0
            try:
                objects_removed = await self._blob.delete_prefix(self._bucket, prefix)
            except Exception as e:
                self._logger.error(
                    "Could not remove stored objects",
                    extra={"bucket": self._bucket, "prefix": prefix, "error": str(e)},
                )
                errors.append(str(e))

            if errors:
                raise IngestionError("; ".join(errors), ProcessingStep.DELETING)

            self._logger.info(
                "Video artifacts deleted",
                extra={"objects_removed": objects_removed, "hls_removed": hls_removed},
            )
        return DeletionResult(
            entity_id=eid,
            objects_removed=objects_removed,
            hls_removed=hls_removed,
        )

    @staticmethod
    async def _remove_directory(directory: Path) -> bool:
        if not directory.exists():
            return False
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, shutil.rmtree, directory)
        return True
