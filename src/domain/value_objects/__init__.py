"""Domain value objects."""

from src.domain.value_objects.entity_id import EntityId
from src.domain.value_objects.object_key import StoreObjectKey, source_extension

__all__ = [
    "EntityId",
    "StoreObjectKey",
    "source_extension",
]
