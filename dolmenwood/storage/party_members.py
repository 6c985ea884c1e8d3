"""Shared party-member summaries, the read model derived from characters.

One document per character, keyed by the character's id, holding only what a
party roster displays. `CharacterManager` keeps it current; nothing else
should write here.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from dolmenwood.models import Entity, PartyMember

from .base import OnChange, Snapshot, StorageError, Subscription
from .manager import CollectionManager

logger = logging.getLogger(__name__)


def _in_party(party_name: str):
    return lambda member: member.get("partyName") == party_name


class PartyMemberManager(CollectionManager):
    label = "party members"
    local_key = "dolmenwood_party_members"
    collection = "shared_party_members"

    async def add(self, partial: Entity) -> Entity | None:
        return await self.save_member(partial)

    async def save_member(self, character: Entity) -> Entity | None:
        """Upsert the summary for a character. Returns None when rejected or unsaved."""
        if not isinstance(character, dict):
            logger.error("Invalid character data provided to save_member")
            return None
        if not character.get("id") or not isinstance(character["id"], str):
            logger.error("Character id is required and must be a string")
            return None
        if not character.get("partyName") or not isinstance(character["partyName"], str):
            logger.error("Party name is required and must be a string")
            return None

        try:
            member = PartyMember.from_character(character, updated_at=self._timestamp()).to_entity()
        except ValidationError as e:
            logger.error("Invalid party member data for %s: %s", character["id"], e)
            return None

        try:
            await self._write("save member", lambda backend: backend.upsert(member))
        except StorageError as e:
            logger.error("Error saving party member %s: %s", member["id"], e)
            return None
        return member

    async def remove_member(self, character_id: str) -> None:
        """Drop a character's summary. Missing summaries are fine."""
        if not character_id:
            return
        try:
            await self._write("remove member", lambda backend: backend.delete(character_id))
        except StorageError as e:
            logger.error("Error removing party member %s: %s", character_id, e)

    async def members_of(self, party_name: str) -> Snapshot:
        if not party_name:
            return []
        return [m for m in await self.list() if m.get("partyName") == party_name]

    async def subscribe_to_party(self, party_name: str, on_change: OnChange) -> Subscription:
        if not party_name:
            return Subscription.noop(label="party:")
        return await self.subscribe(on_change, where=_in_party(party_name))
