"""Unit tests for VideoIngestionService."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.application.dtos.ingestion import ProcessingStep
from src.application.services.ingestion import IngestionError, VideoIngestionService
from src.commons.settings.models import (
    IngestionSettings,
    Settings,
    StorageSettings,
)
from src.domain.exceptions import InvalidEntityIdException, TranscodeException
from src.domain.value_objects import EntityId

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path):
    """Settings with staging and HLS roots inside tmp_path."""
    return Settings(
        storage=StorageSettings(
            upload_dir=str(tmp_path / "uploads"),
            hls_output_dir=str(tmp_path / "hls"),
            hls_public_url="https://videos.example.com",
        ),
    )


@pytest.fixture
def blob_storage():
    """Create mock blob storage."""
    storage = MagicMock()
    storage.upload_file = AsyncMock()
    storage.delete_prefix = AsyncMock(return_value=1)
    return storage


@pytest.fixture
def transcoder():
    """Create mock transcoder reporting a 62.5 second video."""
    mock = MagicMock()
    mock.transcode = AsyncMock(return_value=62.5)
    return mock


@pytest.fixture
def service(blob_storage, transcoder, settings):
    return VideoIngestionService(
        blob_storage=blob_storage,
        transcoder=transcoder,
        settings=settings,
    )


@pytest.fixture
def staged_file(tmp_path):
    """A staged upload on disk."""
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    path = uploads / "l1-1700000000000.mp4"
    path.write_bytes(b"fake video content")
    return path


# =============================================================================
# Ingest
# =============================================================================


class TestIngest:
    """Tests for the ingest pipeline."""

    async def test_success_returns_metadata(self, service, staged_file):
        metadata = await service.ingest("l1", staged_file, "a.mp4", "video/mp4")

        assert metadata.video_provider == "minio"
        assert metadata.video_object_key == "lessons/l1/source.mp4"
        assert metadata.video_hls_url == (
            "https://videos.example.com/hls/lessons/l1/index.m3u8"
        )
        assert metadata.duration_sec == 63

    async def test_uploads_source_with_declared_mime(
        self, service, blob_storage, staged_file
    ):
        await service.ingest(EntityId.parse("l1"), staged_file, "clip.MOV", "video/mp4")

        blob_storage.upload_file.assert_awaited_once_with(
            "raw-videos",
            "lessons/l1/source.MOV",
            staged_file,
            content_type="video/mp4",
        )

    async def test_missing_mime_uses_octet_stream(
        self, service, blob_storage, staged_file
    ):
        await service.ingest("l1", staged_file, "a.mp4", None)

        kwargs = blob_storage.upload_file.call_args.kwargs
        assert kwargs["content_type"] == "application/octet-stream"

    async def test_transcodes_into_entity_directory(
        self, service, transcoder, staged_file, tmp_path
    ):
        await service.ingest("l1", staged_file, "a.mp4", "video/mp4")

        out_dir = tmp_path / "hls" / "lessons" / "l1"
        assert out_dir.is_dir()
        transcoder.transcode.assert_awaited_once_with(
            staged_file, out_dir / "index.m3u8"
        )

    async def test_success_removes_staged_file(self, service, staged_file):
        await service.ingest("l1", staged_file, "a.mp4", "video/mp4")
        assert not staged_file.exists()

    async def test_store_failure_skips_transcode(
        self, service, blob_storage, transcoder, staged_file
    ):
        blob_storage.upload_file.side_effect = ConnectionError("store unreachable")

        with pytest.raises(IngestionError) as exc_info:
            await service.ingest("l1", staged_file, "a.mp4", "video/mp4")

        assert exc_info.value.step == ProcessingStep.UPLOADING_SOURCE
        assert "store unreachable" in str(exc_info.value)
        transcoder.transcode.assert_not_awaited()
        assert not staged_file.exists()

    async def test_transcode_failure_keeps_uploaded_source(
        self, service, blob_storage, transcoder, staged_file
    ):
        transcoder.transcode.side_effect = TranscodeException(
            str(staged_file), "ffmpeg exited with code 1"
        )

        with pytest.raises(IngestionError) as exc_info:
            await service.ingest("l1", staged_file, "a.mp4", "video/mp4")

        assert exc_info.value.step == ProcessingStep.TRANSCODING
        assert "ffmpeg exited with code 1" in str(exc_info.value)
        blob_storage.upload_file.assert_awaited_once()
        blob_storage.delete_prefix.assert_not_awaited()
        assert not staged_file.exists()

    async def test_transcode_error_message_hides_staging_path(
        self, service, transcoder, staged_file
    ):
        transcoder.transcode.side_effect = TranscodeException(
            str(staged_file), "ffmpeg exited with code 1: Invalid data found"
        )

        with pytest.raises(IngestionError) as exc_info:
            await service.ingest("l1", staged_file, "a.mp4", "video/mp4")

        assert str(exc_info.value) == "ffmpeg exited with code 1: Invalid data found"
        assert str(staged_file.parent) not in str(exc_info.value)

    async def test_invalid_entity_id_still_cleans_up(
        self, service, blob_storage, staged_file
    ):
        with pytest.raises(InvalidEntityIdException):
            await service.ingest("../escape", staged_file, "a.mp4", "video/mp4")

        blob_storage.upload_file.assert_not_awaited()
        assert not staged_file.exists()

    async def test_cleanup_error_is_not_raised(self, service, staged_file):
        with patch.object(Path, "unlink", side_effect=PermissionError("busy")):
            metadata = await service.ingest("l1", staged_file, "a.mp4", "video/mp4")

        assert metadata.duration_sec == 63

    async def test_already_missing_staged_file_is_fine(self, service, staged_file):
        staged_file.unlink()
        metadata = await service.ingest("l1", staged_file, "a.mp4", "video/mp4")
        assert metadata.video_object_key == "lessons/l1/source.mp4"

    async def test_keep_staged_on_failure(
        self, blob_storage, transcoder, settings, staged_file
    ):
        settings.ingestion = IngestionSettings(keep_staged_on_failure=True)
        service = VideoIngestionService(blob_storage, transcoder, settings)
        transcoder.transcode.side_effect = TranscodeException("x", "boom")

        with pytest.raises(IngestionError):
            await service.ingest("l1", staged_file, "a.mp4", "video/mp4")

        assert staged_file.exists()

    async def test_keep_staged_does_not_affect_success(
        self, blob_storage, transcoder, settings, staged_file
    ):
        settings.ingestion = IngestionSettings(keep_staged_on_failure=True)
        service = VideoIngestionService(blob_storage, transcoder, settings)

        await service.ingest("l1", staged_file, "a.mp4", "video/mp4")

        assert not staged_file.exists()

    async def test_reingest_writes_same_key(
        self, service, blob_storage, staged_file, tmp_path
    ):
        await service.ingest("l1", staged_file, "first.mp4", "video/mp4")
        second = tmp_path / "uploads" / "l1-1700000000999.mp4"
        second.write_bytes(b"second upload")

        metadata = await service.ingest("l1", second, "second.mp4", "video/mp4")

        keys = [c.args[1] for c in blob_storage.upload_file.call_args_list]
        assert keys == ["lessons/l1/source.mp4", "lessons/l1/source.mp4"]
        assert metadata.video_object_key == "lessons/l1/source.mp4"

    @pytest.mark.parametrize(
        ("duration", "expected"),
        [(0.0, 0), (0.5, 1), (9.49, 9), (120.0, 120)],
    )
    async def test_duration_is_rounded(
        self, service, transcoder, staged_file, duration, expected
    ):
        transcoder.transcode.return_value = duration
        metadata = await service.ingest("l1", staged_file, "a.mp4", "video/mp4")
        assert metadata.duration_sec == expected

    async def test_custom_entity_kind(
        self, blob_storage, transcoder, settings, staged_file
    ):
        settings.ingestion = IngestionSettings(entity_kind="courses")
        service = VideoIngestionService(blob_storage, transcoder, settings)

        metadata = await service.ingest("c1", staged_file, "a.mp4", "video/mp4")

        assert metadata.video_object_key == "courses/c1/source.mp4"
        assert "/hls/courses/c1/index.m3u8" in metadata.video_hls_url


# =============================================================================
# Delete
# =============================================================================


class TestDelete:
    """Tests for removing an entity's artifacts."""

    async def test_removes_objects_and_hls_output(
        self, service, blob_storage, tmp_path
    ):
        out_dir = tmp_path / "hls" / "lessons" / "l1"
        out_dir.mkdir(parents=True)
        (out_dir / "index.m3u8").write_text("#EXTM3U\n")
        (out_dir / "index0.ts").write_bytes(b"ts")
        blob_storage.delete_prefix.return_value = 1

        result = await service.delete("l1")

        blob_storage.delete_prefix.assert_awaited_once_with("raw-videos", "lessons/l1/")
        assert not out_dir.exists()
        assert result.objects_removed == 1
        assert result.hls_removed is True

    async def test_nothing_to_remove(self, service, blob_storage):
        blob_storage.delete_prefix.return_value = 0

        result = await service.delete("l2")

        assert result.objects_removed == 0
        assert result.hls_removed is False

    async def test_store_failure_still_removes_hls(
        self, service, blob_storage, tmp_path
    ):
        out_dir = tmp_path / "hls" / "lessons" / "l1"
        out_dir.mkdir(parents=True)
        blob_storage.delete_prefix.side_effect = ConnectionError("store down")

        with pytest.raises(IngestionError) as exc_info:
            await service.delete("l1")

        assert exc_info.value.step == ProcessingStep.DELETING
        assert "store down" in str(exc_info.value)
        assert not out_dir.exists()

    async def test_invalid_entity_id(self, service, blob_storage):
        with pytest.raises(InvalidEntityIdException):
            await service.delete("a/b")
        blob_storage.delete_prefix.assert_not_awaited()
