"""MinIO implementation of blob storage."""

import asyncio
import time
from pathlib import Path

from minio import Minio
from minio.deleteobjects import DeleteObject

from src.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobStorageBase,
    HealthStatus,
)
from src.commons.telemetry import get_logger, timed


class BlobDeleteError(Exception):
    """Raised when some objects under a prefix could not be removed."""

    def __init__(self, bucket: str, prefix: str, failures: list[str]) -> None:
        self.bucket = bucket
        self.prefix = prefix
        self.failures = failures
        super().__init__(
            f"Failed to delete {len(failures)} object(s) under {bucket}/{prefix}"
        )


class MinioBlobStorage(BlobStorageBase):
    """MinIO implementation of blob storage.

    Always uses path-style requests (``http://host:port/bucket/key``) so the
    client works against bare IP endpoints as well as DNS names.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
        region: str | None = None,
        client: Minio | None = None,
    ) -> None:
        """Initialize MinIO client.

        Args:
            endpoint: MinIO/S3 endpoint including port (e.g., "10.0.0.5:9000").
            access_key: Access key ID.
            secret_key: Secret access key.
            secure: Use HTTPS connection.
            region: Region; set it to skip the bucket-location lookup.
            client: Pre-built client, mainly for tests.
        """
        self._client = client or Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._client.disable_virtual_style_endpoint()
        self._endpoint = endpoint
        self._secure = secure
        self._logger = get_logger(__name__)

    @timed
    async def upload_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload a local file in a single attempt.

        Store and transport errors (``S3Error``, urllib3 errors) propagate
        unchanged so the caller can classify them.
        """
        loop = asyncio.get_event_loop()

        def _upload() -> BlobMetadata:
            result = self._client.fput_object(
                bucket_name=bucket,
                object_name=path,
                file_path=str(local_path),
                content_type=content_type,
            )
            return BlobMetadata(
                bucket=bucket,
                path=path,
                size_bytes=local_path.stat().st_size,
                content_type=content_type,
                etag=result.etag or "",
                created_at=result.last_modified,
            )

        metadata = await loop.run_in_executor(None, _upload)
        self._logger.info(
            "Uploaded blob",
            extra={
                "bucket": bucket,
                "object_key": path,
                "size_bytes": metadata.size_bytes,
            },
        )
        return metadata

    async def delete_prefix(self, bucket: str, prefix: str) -> int:
        """Delete every blob whose key starts with ``prefix``."""
        loop = asyncio.get_event_loop()

        def _delete() -> int:
            targets = [
                DeleteObject(obj.object_name)
                for obj in self._client.list_objects(
                    bucket_name=bucket,
                    prefix=prefix,
                    recursive=True,
                )
                if obj.object_name
            ]
            if not targets:
                return 0
            failures = [
                f"{error.name}: {error.message}"
                for error in self._client.remove_objects(bucket, targets)
            ]
            if failures:
                raise BlobDeleteError(bucket, prefix, failures)
            return len(targets)

        return await loop.run_in_executor(None, _delete)

    async def health_check(self) -> HealthStatus:
        """Check service health by listing buckets."""
        start = time.perf_counter()
        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, self._client.list_buckets)
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MinIO is healthy",
                details={"endpoint": self._endpoint},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MinIO health check failed: {e}",
                details={"endpoint": self._endpoint, "error": str(e)},
            )
