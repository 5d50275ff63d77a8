"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from src.commons.infrastructure.blob import BlobStorageBase, MinioBlobStorage
from src.commons.settings.models import Settings
from src.infrastructure.video import FFmpegHLSTranscoder, HLSProfile, TranscoderBase


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates each client once per process and hands the same instance to
    every request.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    def get_blob_storage(self) -> BlobStorageBase:
        """Get blob storage instance.

        Returns:
            Configured blob storage provider.
        """
        if "blob_storage" not in self._instances:
            blob_settings = self._settings.blob_storage
            self._instances["blob_storage"] = MinioBlobStorage(
                endpoint=blob_settings.address,
                access_key=blob_settings.access_key,
                secret_key=blob_settings.secret_key,
                secure=blob_settings.use_ssl,
                region=blob_settings.region,
            )
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_transcoder(self) -> TranscoderBase:
        """Get HLS transcoder instance.

        Returns:
            Configured transcoder.
        """
        if "transcoder" not in self._instances:
            trans_settings = self._settings.transcoding
            self._instances["transcoder"] = FFmpegHLSTranscoder(
                ffmpeg_path=trans_settings.ffmpeg_path,
                profile=HLSProfile(
                    video_codec=trans_settings.video_codec,
                    audio_codec=trans_settings.audio_codec,
                    profile=trans_settings.profile,
                    level=trans_settings.level,
                    segment_seconds=trans_settings.segment_seconds,
                ),
                timeout_seconds=trans_settings.timeout_seconds,
                max_workers=trans_settings.max_concurrent_transcodes,
            )
        return cast("TranscoderBase", self._instances["transcoder"])

    def close_all(self) -> None:
        """Release worker pools and drop cached instances."""
        transcoder = self._instances.get("transcoder")
        if transcoder is not None:
            transcoder.close()
        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
