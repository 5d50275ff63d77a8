"""Video ingestion domain models."""

import math
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from src.domain.value_objects import EntityId


def round_duration(seconds: float) -> int:
    """Round a duration to whole seconds, halves rounding up."""
    return max(0, math.floor(seconds + 0.5))


@dataclass(frozen=True)
class StagedFile:
    """Local copy of an upload, owned by exactly one request."""

    path: Path
    extension: str
    entity_id: EntityId
    size_bytes: int


@dataclass(frozen=True)
class TranscodeTarget:
    """Where the HLS rendition of an entity is written and served from."""

    directory: Path
    manifest_path: Path
    public_url: str

    @classmethod
    def for_entity(
        cls,
        *,
        hls_root: Path,
        public_base_url: str,
        entity_kind: str,
        entity_id: EntityId,
        manifest_name: str = "index.m3u8",
    ) -> "TranscodeTarget":
        """Derive the output directory and public manifest URL for an entity."""
        directory = hls_root / entity_kind / entity_id.value
        base = public_base_url.rstrip("/")
        return cls(
            directory=directory,
            manifest_path=directory / manifest_name,
            public_url=f"{base}/hls/{entity_kind}/{entity_id.value}/{manifest_name}",
        )


class VideoMetadata(BaseModel):
    """Playable metadata returned once per successful ingest.

    Serialized with camelCase keys for the LMS frontend.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    video_provider: str = Field(
        alias="videoProvider",
        description="Provider tag of the blob store holding the source",
    )
    video_object_key: str = Field(
        alias="videoObjectKey",
        description="Key of the source object in the raw bucket",
    )
    video_hls_url: str = Field(
        alias="videoHlsUrl",
        description="Public URL of the HLS manifest",
    )
    duration_sec: int = Field(
        alias="durationSec",
        ge=0,
        description="Duration rounded to whole seconds",
    )


@dataclass(frozen=True)
class DeletionResult:
    """Outcome of removing an entity's stored video artifacts."""

    entity_id: EntityId
    objects_removed: int
    hls_removed: bool
