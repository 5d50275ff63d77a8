"""Staging of uploaded files on local disk."""

import asyncio
import time
from pathlib import Path
from typing import BinaryIO, Protocol

from src.commons.telemetry import get_logger
from src.domain.exceptions import UploadTooLargeException
from src.domain.models.video import StagedFile
from src.domain.value_objects import EntityId, source_extension


class AsyncReadable(Protocol):
    """Anything with an awaitable ``read(size)``, e.g. Starlette's UploadFile."""

    async def read(self, size: int = -1) -> bytes: ...


class StagingArea:
    """Writes uploads into the staging directory, one file per request.

    Files are named ``<entityId>-<unix-millis><ext>`` so concurrent uploads
    for the same entity never share a path.
    """

    def __init__(
        self,
        upload_dir: Path,
        max_size_bytes: int,
        chunk_size_bytes: int = 1024 * 1024,
    ) -> None:
        self._upload_dir = upload_dir
        self._max_size = max_size_bytes
        self._chunk_size = chunk_size_bytes
        self._logger = get_logger(__name__)

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def _create_staging_file(
        self, entity_id: EntityId, extension: str
    ) -> tuple[Path, BinaryIO]:
        """Exclusively create the next free ``<id>-<millis><ext>`` file."""
        millis = time.time_ns() // 1_000_000
        while True:
            path = self._upload_dir / f"{entity_id}-{millis}{extension}"
            try:
                return path, path.open("xb")
            except FileExistsError:
                millis += 1

    async def stage(
        self,
        entity_id: EntityId,
        source: AsyncReadable,
        original_filename: str,
    ) -> StagedFile:
        """Copy ``source`` to a new staging file.

        Raises:
            UploadTooLargeException: If more than ``max_size_bytes`` arrive.
                The partial file is removed before raising.
        """
        extension = source_extension(original_filename)
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        loop = asyncio.get_event_loop()

        path, fh = self._create_staging_file(entity_id, extension)
        written = 0
        try:
            with fh:
                while chunk := await source.read(self._chunk_size):
                    written += len(chunk)
                    if written > self._max_size:
                        raise UploadTooLargeException(self._max_size, written)
                    await loop.run_in_executor(None, fh.write, chunk)
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        self._logger.info(
            "Upload staged",
            extra={"staged_path": str(path), "size_bytes": written},
        )
        return StagedFile(
            path=path,
            extension=extension,
            entity_id=entity_id,
            size_bytes=written,
        )
