"""Unit tests for video domain models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.domain.models.video import (
    DeletionResult,
    StagedFile,
    TranscodeTarget,
    VideoMetadata,
    round_duration,
)
from src.domain.value_objects import EntityId


class TestRoundDuration:
    """Tests for round_duration."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0.0, 0),
            (0.4, 0),
            (0.5, 1),
            (2.5, 3),
            (3.5, 4),
            (62.49, 62),
            (62.5, 63),
            (3600.0, 3600),
        ],
    )
    def test_halves_round_up(self, seconds, expected):
        assert round_duration(seconds) == expected

    def test_never_negative(self):
        assert round_duration(-3.2) == 0


class TestTranscodeTarget:
    """Tests for TranscodeTarget."""

    def test_paths_and_url(self):
        target = TranscodeTarget.for_entity(
            hls_root=Path("/srv/hls"),
            public_base_url="https://videos.example.com",
            entity_kind="lessons",
            entity_id=EntityId.parse("l1"),
        )
        assert target.directory == Path("/srv/hls/lessons/l1")
        assert target.manifest_path == Path("/srv/hls/lessons/l1/index.m3u8")
        assert target.public_url == (
            "https://videos.example.com/hls/lessons/l1/index.m3u8"
        )

    def test_trailing_slash_on_base_url(self):
        target = TranscodeTarget.for_entity(
            hls_root=Path("/srv/hls"),
            public_base_url="https://videos.example.com/",
            entity_kind="lessons",
            entity_id=EntityId.parse("l1"),
        )
        assert target.public_url == (
            "https://videos.example.com/hls/lessons/l1/index.m3u8"
        )

    def test_custom_manifest_name(self):
        target = TranscodeTarget.for_entity(
            hls_root=Path("/hls"),
            public_base_url="http://h",
            entity_kind="courses",
            entity_id=EntityId.parse("c9"),
            manifest_name="master.m3u8",
        )
        assert target.manifest_path.name == "master.m3u8"
        assert target.public_url == "http://h/hls/courses/c9/master.m3u8"


class TestVideoMetadata:
    """Tests for VideoMetadata."""

    def _metadata(self, **overrides):
        data = {
            "videoProvider": "minio",
            "videoObjectKey": "lessons/l1/source.mp4",
            "videoHlsUrl": "https://h/hls/lessons/l1/index.m3u8",
            "durationSec": 63,
        }
        data.update(overrides)
        return VideoMetadata(**data)

    def test_serializes_camel_case(self):
        dumped = self._metadata().model_dump(by_alias=True)
        assert dumped == {
            "videoProvider": "minio",
            "videoObjectKey": "lessons/l1/source.mp4",
            "videoHlsUrl": "https://h/hls/lessons/l1/index.m3u8",
            "durationSec": 63,
        }

    def test_populate_by_field_name(self):
        metadata = VideoMetadata(
            video_provider="minio",
            video_object_key="k",
            video_hls_url="u",
            duration_sec=1,
        )
        assert metadata.duration_sec == 1

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            self._metadata(durationSec=-1)

    def test_is_immutable(self):
        metadata = self._metadata()
        with pytest.raises(ValidationError):
            metadata.duration_sec = 5  # type: ignore[misc]


class TestDataclasses:
    """Tests for StagedFile and DeletionResult."""

    def test_staged_file_is_frozen(self):
        staged = StagedFile(
            path=Path("/tmp/l1-1.mp4"),
            extension=".mp4",
            entity_id=EntityId.parse("l1"),
            size_bytes=10,
        )
        with pytest.raises(AttributeError):
            staged.size_bytes = 20  # type: ignore[misc]

    def test_deletion_result_fields(self):
        result = DeletionResult(
            entity_id=EntityId.parse("l1"), objects_removed=2, hls_removed=True
        )
        assert result.objects_removed == 2
        assert result.hls_removed is True
