"""Abstract base class for blob storage operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass
class BlobMetadata:
    """Metadata for a stored blob."""

    bucket: str
    path: str
    size_bytes: int
    content_type: str
    etag: str
    created_at: datetime | None = None


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class BlobStorageBase(ABC):
    """Abstract base class for blob storage operations.

    Buckets are provisioned outside this service; implementations must
    never create them.
    """

    @abstractmethod
    async def upload_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload a local file, streaming it from disk.

        Args:
            bucket: Target bucket name. Must already exist.
            path: Object key within the bucket.
            local_path: File to upload.
            content_type: MIME type stored with the object.

        Returns:
            Metadata of the uploaded blob.
        """

    @abstractmethod
    async def delete_prefix(self, bucket: str, prefix: str) -> int:
        """Delete every blob whose key starts with ``prefix``.

        Args:
            bucket: Bucket name.
            prefix: Key prefix, usually ending with "/".

        Returns:
            Number of blobs removed.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """
