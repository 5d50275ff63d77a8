"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "lesson-video-api"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=3001, ge=1, le=65535)
    workers: int = Field(default=1, ge=1, le=32)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    docs_enabled: bool = True


class BucketSettings(BaseModel):
    """Bucket name configuration."""

    raw_videos: str = "raw-videos"


class BlobStorageSettings(BaseModel):
    """Blob storage settings (MinIO/S3)."""

    provider: Literal["minio"] = "minio"
    endpoint: str = "minio.racoondevs.com"
    port: int | None = Field(default=443, ge=1, le=65535)
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str = "us-east-1"
    buckets: BucketSettings = Field(default_factory=BucketSettings)

    @property
    def address(self) -> str:
        """Endpoint in ``host[:port]`` form as the MinIO client expects it."""
        if self.port is None or ":" in self.endpoint:
            return self.endpoint
        return f"{self.endpoint}:{self.port}"


class StorageSettings(BaseModel):
    """Local filesystem locations for staging and HLS output."""

    upload_dir: str = "/opt/video-stack/uploads"
    hls_output_dir: str = "/opt/video-stack/hls-data"
    hls_public_url: str = "https://videos.racoondevs.com"


class TranscodingSettings(BaseModel):
    """FFmpeg HLS transcoding settings."""

    ffmpeg_path: str = "ffmpeg"
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    profile: str = "baseline"
    level: str = "3.0"
    segment_seconds: int = Field(default=10, ge=1)
    manifest_name: str = "index.m3u8"
    timeout_seconds: float | None = Field(default=None, gt=0)
    max_concurrent_transcodes: int = Field(default=2, ge=1)


class UploadSettings(BaseModel):
    """Incoming upload limits."""

    max_size_bytes: int = Field(default=5000 * 1024 * 1024, ge=1)
    chunk_size_bytes: int = Field(default=1024 * 1024, ge=1024)


class IngestionSettings(BaseModel):
    """Ingestion pipeline behaviour."""

    entity_kind: str = Field(default="lessons", pattern=r"^[a-z][a-z0-9_-]*$")
    provider_tag: str = "minio"
    keep_staged_on_failure: bool = False


class TelemetrySettings(BaseModel):
    """Logging settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    transcoding: TranscodingSettings = Field(default_factory=TranscodingSettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDEO_API__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
