"""Shared campaign maps, newest first.

Delete is unconditional here; only the uploader is offered the delete action
by the callers.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from dolmenwood.models import Entity, MapInput

from .manager import CollectionManager

logger = logging.getLogger(__name__)


class MapManager(CollectionManager):
    label = "maps"
    local_key = "dolmenwood_maps"
    collection = "shared_maps"
    newest_first = True
    tracks_updates = False

    def _prepare_new(self, partial: Entity) -> Entity | None:
        try:
            return MapInput.model_validate(partial).model_dump(by_alias=True)
        except ValidationError as e:
            logger.error("Rejected map: %s", e)
            return None
