"""Core domain models.

Entities travel through the storage layer as plain dicts with camelCase keys,
exactly as they are serialised in both backends. Character sheets are opaque
to the storage layer; the models here only cover the shapes the layer itself
validates or derives.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Entity = dict[str, Any]

PARTY_NAME_MAX = 100
PARTY_DESCRIPTION_MAX = 500


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartyInput(_CamelModel):
    """Fields accepted when creating a party."""

    name: str = Field(min_length=1, max_length=PARTY_NAME_MAX)
    description: str = Field(default="", max_length=PARTY_DESCRIPTION_MAX)


class PartyUpdate(_CamelModel):
    """Allow-listed party fields for a partial update.

    Anything else in the caller's dict (id, timestamps, ownership) is dropped.
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(default=None, min_length=1, max_length=PARTY_NAME_MAX)
    description: str | None = Field(default=None, max_length=PARTY_DESCRIPTION_MAX)


class MapInput(_CamelModel):
    """A shared campaign map as uploaded."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    image_data: str  # encoded image payload, opaque here
    uploaded_by: str = ""  # display label, usually the uploader's email
    uploaded_by_id: str | None = None


class PartyMember(_CamelModel):
    """Read-optimised projection of a character that belongs to a party."""

    id: str
    name: str = "Unnamed Character"
    party_name: str
    kindred_class: str = ""
    level: Any = 1
    hp: Any = 0
    max_hp: Any = 0
    ac: Any = 10  # sheets may hold text like "14/15 +shield"
    avatar: str | None = None
    user_id: str | None = None
    updated_at: str

    @classmethod
    def from_character(cls, character: Entity, updated_at: str) -> "PartyMember":
        """Build a summary from a character dict, falling back to defaults for
        missing or blank display fields."""
        return cls(
            id=character["id"],
            name=character.get("name") or "Unnamed Character",
            party_name=character["partyName"],
            kindred_class=character.get("kindredClass") or "",
            level=character.get("level") or 1,
            hp=character.get("hp") or 0,
            max_hp=character.get("maxHp") or 0,
            ac=character.get("ac") or 10,
            avatar=character.get("avatar") or None,
            user_id=character.get("userId") or None,
            updated_at=updated_at,
        )

    def to_entity(self) -> Entity:
        return self.model_dump(by_alias=True)
