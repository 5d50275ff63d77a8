"""Deterministic blob store key for an entity's source video."""

from __future__ import annotations

from pathlib import PurePath

from pydantic import BaseModel, ConfigDict

from src.domain.value_objects.entity_id import EntityId


def source_extension(original_filename: str) -> str:
    """Return the extension of ``original_filename`` as given, dot included.

    Only the final component counts, so client-supplied directory parts are
    ignored. Returns an empty string when there is no extension.
    """
    name = PurePath(original_filename.replace("\\", "/")).name
    return PurePath(name).suffix


class StoreObjectKey(BaseModel):
    """Key of the original upload: ``<entity-kind>/<entityId>/source<ext>``.

    One source object exists per entity id; a later upload overwrites it.
    """

    model_config = ConfigDict(frozen=True)

    entity_kind: str
    entity_id: EntityId
    extension: str = ""

    @classmethod
    def for_upload(
        cls,
        entity_kind: str,
        entity_id: EntityId,
        original_filename: str,
    ) -> StoreObjectKey:
        """Build the key for an uploaded file."""
        return cls(
            entity_kind=entity_kind,
            entity_id=entity_id,
            extension=source_extension(original_filename),
        )

    @property
    def prefix(self) -> str:
        """Prefix shared by every object stored for this entity."""
        return f"{self.entity_kind}/{self.entity_id}/"

    @property
    def value(self) -> str:
        return f"{self.prefix}source{self.extension}"

    def __str__(self) -> str:
        return self.value
