"""Local Store: whole collections as JSON arrays under fixed keys.

Each key maps to one file in the data directory:

    {data_dir}/
      dolmenwood_characters.json   ← list of character dicts
      dolmenwood_parties.json      ← list of party dicts
      dolmenwood_party_members.json
      dolmenwood_maps.json
      mock_user.json               ← signed-in user for local auth

No concurrency and no network; every write rewrites the whole array.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dolmenwood.models import Entity

from .base import OnChange, Snapshot, Subscription, deliver

logger = logging.getLogger(__name__)


class LocalStore:
    def __init__(self, data_dir: Path) -> None:
        self._dir = data_dir
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def data_dir(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get(self, key: str) -> Any | None:
        """Return the decoded value for key, or None if it was never set."""
        path = self._path(key)
        if not path.is_file():
            return None
        return json.loads(path.read_text())

    def set(self, key: str, value: Any) -> None:
        self._path(key).write_text(json.dumps(value, indent=2))

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def has(self, key: str) -> bool:
        return self._path(key).is_file()


class LocalCollection:
    """`CollectionBackend` over one Local Store key."""

    name = "local"

    def __init__(self, store: LocalStore, key: str) -> None:
        self._store = store
        self.key = key

    def _load(self) -> Snapshot:
        data = self._store.get(self.key)
        return list(data) if data else []

    async def read_all(self) -> Snapshot:
        return self._load()

    async def put_many(self, entities: Snapshot) -> None:
        by_id = {e["id"]: e for e in self._load()}
        for entity in entities:
            by_id[entity["id"]] = entity
        self._store.set(self.key, list(by_id.values()))

    async def upsert(self, entity: Entity) -> None:
        entities = self._load()
        for i, existing in enumerate(entities):
            if existing.get("id") == entity["id"]:
                entities[i] = entity
                break
        else:
            entities.append(entity)
        self._store.set(self.key, entities)

    async def merge(self, entity_id: str, fields: Entity) -> Entity | None:
        entities = self._load()
        for i, existing in enumerate(entities):
            if existing.get("id") == entity_id:
                merged = {**existing, **fields}
                entities[i] = merged
                self._store.set(self.key, entities)
                return merged
        return None

    async def delete(self, entity_id: str) -> None:
        entities = self._load()
        remaining = [e for e in entities if e.get("id") != entity_id]
        if len(remaining) != len(entities):
            self._store.set(self.key, remaining)

    async def watch(self, on_change: OnChange) -> Subscription:
        # Pull-only backend: a single snapshot, nothing to release afterwards.
        await deliver(on_change, self._load())
        return Subscription.noop(label=f"local:{self.key}")

    async def clear(self) -> None:
        self._store.remove(self.key)
