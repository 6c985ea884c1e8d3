"""Owned character sheets, plus upkeep of the party-member projection.

Every character write that can change party membership is followed by a
separate write to the shared summaries: upsert when the character has a
`partyName`, delete otherwise. The summary write has its own error boundary
and never fails or rolls back the character write.
"""

from __future__ import annotations

import logging

from dolmenwood.models import Entity

from .base import Snapshot
from .manager import CollectionManager
from .party_members import PartyMemberManager
from .session import StorageContext

logger = logging.getLogger(__name__)


class CharacterManager(CollectionManager):
    label = "characters"
    local_key = "dolmenwood_characters"
    collection = "characters"
    owned = True
    migrates = True
    immutable_fields = ("id", "createdAt", "userId")

    def __init__(self, context: StorageContext, members: PartyMemberManager) -> None:
        super().__init__(context)
        self._members = members

    def _prepare_new(self, partial: Entity) -> Entity | None:
        return {**partial, "userId": self._context.identity}

    async def add(self, partial: Entity) -> Entity | None:
        character = await super().add(partial)
        if character is not None:
            await self._sync_member(character)
        return character

    async def update(self, entity_id: str, partial: Entity) -> Entity | None:
        character = await super().update(entity_id, partial)
        if character is not None:
            await self._sync_member(character)
        return character

    async def remove(self, entity_id: str) -> Snapshot:
        remaining = await super().remove(entity_id)
        await self._drop_member(entity_id)
        return remaining

    async def save_all(self, entities: Snapshot) -> None:
        await super().save_all(entities)
        for character in entities:
            await self._sync_member(character)

    async def _sync_member(self, character: Entity) -> None:
        if not character.get("partyName"):
            await self._drop_member(character["id"])
            return
        try:
            saved = await self._members.save_member(character)
        except Exception:
            logger.exception("Party member upkeep failed for character %s", character["id"])
            saved = None
        if saved is None:
            # a rejected summary must not leave the previous one behind
            await self._drop_member(character["id"])

    async def _drop_member(self, character_id: str) -> None:
        try:
            await self._members.remove_member(character_id)
        except Exception:
            logger.exception("Party member removal failed for character %s", character_id)
