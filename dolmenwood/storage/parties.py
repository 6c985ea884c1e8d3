"""Shared parties. Only `name` and `description` are accepted from callers."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from dolmenwood.models import Entity, PartyInput, PartyUpdate

from .manager import CollectionManager

logger = logging.getLogger(__name__)


class PartyManager(CollectionManager):
    label = "parties"
    local_key = "dolmenwood_parties"
    collection = "shared_parties"
    newest_first = True
    migrates = True

    def _prepare_new(self, partial: Entity) -> Entity | None:
        try:
            return PartyInput.model_validate(partial).model_dump(by_alias=True)
        except ValidationError as e:
            logger.error("Rejected party: %s", e)
            return None

    def _prepare_update(self, partial: Entity) -> Entity | None:
        try:
            update = PartyUpdate.model_validate(partial)
        except ValidationError as e:
            logger.error("Rejected party update: %s", e)
            return None
        return update.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
