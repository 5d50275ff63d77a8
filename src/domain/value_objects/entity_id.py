"""Entity identifier value object."""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.domain.exceptions import InvalidEntityIdException

# Used verbatim as a directory name and an object key segment
ENTITY_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class EntityId(BaseModel):
    """Opaque identifier of the content unit (lesson) a video belongs to.

    Examples:
        >>> EntityId.parse("lesson_42").value
        'lesson_42'
    """

    model_config = ConfigDict(frozen=True)

    value: Annotated[
        str,
        Field(min_length=1, max_length=128, description="Entity identifier"),
    ]

    @field_validator("value")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Reject anything that is not a single safe path segment."""
        if not ENTITY_ID_PATTERN.match(v):
            msg = (
                f"Invalid entity id format: '{v}'. "
                "Use 1-128 letters, digits, underscores or hyphens."
            )
            raise ValueError(msg)
        return v

    @classmethod
    def parse(cls, raw: str) -> EntityId:
        """Build an EntityId, raising a domain exception on bad input.

        Raises:
            InvalidEntityIdException: If ``raw`` is not a valid identifier.
        """
        try:
            return cls(value=raw)
        except ValidationError as e:
            raise InvalidEntityIdException(
                raw, "use 1-128 letters, digits, underscores or hyphens"
            ) from e

    def __str__(self) -> str:
        return self.value
