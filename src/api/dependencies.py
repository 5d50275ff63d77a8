"""FastAPI dependency injection for services and settings."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends

from src.application.services.ingestion import VideoIngestionService
from src.application.services.staging import StagingArea
from src.commons.settings.loader import get_settings as _load_settings
from src.commons.settings.models import Settings
from src.commons.telemetry import get_logger
from src.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)

logger = get_logger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get infrastructure factory with all providers.

    Args:
        settings: Application settings.

    Returns:
        Configured infrastructure factory.
    """
    return get_factory(settings)


def get_ingestion_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoIngestionService:
    """Get video ingestion service with all dependencies.

    Args:
        factory: Infrastructure factory.
        settings: Application settings.

    Returns:
        Configured video ingestion service.
    """
    return VideoIngestionService(
        blob_storage=factory.get_blob_storage(),
        transcoder=factory.get_transcoder(),
        settings=settings,
    )


def get_staging_area(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StagingArea:
    """Get the staging area for incoming uploads."""
    return StagingArea(
        upload_dir=Path(settings.storage.upload_dir),
        max_size_bytes=settings.upload.max_size_bytes,
        chunk_size_bytes=settings.upload.chunk_size_bytes,
    )


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
IngestionServiceDep = Annotated[VideoIngestionService, Depends(get_ingestion_service)]
StagingAreaDep = Annotated[StagingArea, Depends(get_staging_area)]


async def init_services(settings: Settings) -> None:
    """Initialize all infrastructure services on startup.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    # Pre-initialize clients to fail fast on bad configuration
    factory.get_blob_storage()
    transcoder = factory.get_transcoder()
    if not transcoder.is_available():
        logger.warning(
            "FFmpeg binary not found; uploads will fail until it is installed",
            extra={"ffmpeg_path": settings.transcoding.ffmpeg_path},
        )

    logger.info(
        "Services initialized",
        extra={
            "upload_dir": settings.storage.upload_dir,
            "hls_output_dir": settings.storage.hls_output_dir,
            "bucket": settings.blob_storage.buckets.raw_videos,
        },
    )


async def shutdown_services() -> None:
    """Shutdown all infrastructure services."""
    try:
        factory = get_factory()
        factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        reset_factory()
        get_settings.cache_clear()
