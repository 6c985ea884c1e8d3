"""Generic collection manager over the Local and Cloud backends.

Routing rules, kept in this one place:

  reads   cloud (when the gate is open) → on failure the Local Store → on
          failure an empty list. Never raises.
  writes  cloud (when the gate is open) → on failure the same write against
          the Local Store → on failure `StorageError`. A write either lands in
          exactly one backend or the caller hears about it.
  watch   cloud push listener, or a single Local Store snapshot with a no-op
          subscription.

Subclasses set the class attributes and may override `_prepare_new` /
`_prepare_update` to validate and allow-list fields.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar
from uuid import uuid4

from dolmenwood.models import Entity

from .base import CollectionBackend, OnChange, Snapshot, StorageError, Subscription, deliver
from .cloud import CloudCollection
from .gate import AvailabilityGate
from .local import LocalCollection
from .migration import migrate_local_to_cloud
from .session import StorageContext

logger = logging.getLogger(__name__)

T = TypeVar("T")

Predicate = Callable[[Entity], bool]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid4())


class CollectionManager:
    label = "collection"
    local_key = ""
    collection = ""  # cloud collection name; owned ones live under users/{uid}/
    owned = False
    newest_first = False
    migrates = False
    tracks_updates = True
    immutable_fields: tuple[str, ...] = ("id", "createdAt")

    def __init__(self, context: StorageContext) -> None:
        self._context = context
        self._gate = AvailabilityGate(self.label, timeout=context.timeout)
        self._local = LocalCollection(context.local, self.local_key)
        self._cloud: CloudCollection | None = None
        path = context.owned_path(self.collection) if self.owned else self.collection
        if context.cloud is not None and path is not None:
            self._cloud = context.cloud.collection(path)

    @property
    def context(self) -> StorageContext:
        return self._context

    @property
    def cloud_active(self) -> bool:
        return self._gate.active and self._cloud is not None

    async def init(self) -> bool:
        """Run the availability check (and the legacy migration) for this collection."""
        active = await self._gate.init(self._context.cloud, eligible=self._cloud is not None)
        if active and self.migrates and self._cloud is not None:
            await migrate_local_to_cloud(self._context.local, self._local, self._cloud)
        return active

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def _read(self) -> Snapshot:
        if self.cloud_active:
            try:
                return await self._cloud.read_all()  # type: ignore[union-attr]
            except Exception as e:
                logger.warning("Error reading %s from cloud, using local storage: %s", self.label, e)
        try:
            return await self._local.read_all()
        except Exception as e:
            logger.error("Error reading %s from local storage: %s", self.label, e)
            return []

    async def _write(self, op: str, call: Callable[[CollectionBackend], Awaitable[T]]) -> T:
        if self.cloud_active:
            try:
                return await call(self._cloud)  # type: ignore[arg-type]
            except Exception as e:
                logger.warning("Error in %s %s on cloud, retrying locally: %s", self.label, op, e)
        try:
            return await call(self._local)
        except Exception as e:
            logger.error("Error in %s %s on local storage: %s", self.label, op, e)
            raise StorageError(f"Could not {op} {self.label}") from e

    def _shape(self, snapshot: Snapshot, where: Predicate | None = None) -> Snapshot:
        if where is not None:
            snapshot = [e for e in snapshot if where(e)]
        if self.newest_first:
            snapshot = sorted(snapshot, key=lambda e: e.get("createdAt") or "", reverse=True)
        return snapshot

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _timestamp(self) -> str:
        return _now()

    def _prepare_new(self, partial: Entity) -> Entity | None:
        return dict(partial)

    def _prepare_update(self, partial: Entity) -> Entity | None:
        return {k: v for k, v in partial.items() if k not in self.immutable_fields}

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    async def list(self) -> Snapshot:
        return self._shape(await self._read())

    async def get(self, entity_id: str) -> Entity | None:
        for entity in await self._read():
            if entity.get("id") == entity_id:
                return entity
        return None

    async def add(self, partial: Entity) -> Entity | None:
        """Store a new entity with a fresh id and timestamps. None if rejected."""
        fields = self._prepare_new(partial)
        if fields is None:
            return None
        now = self._timestamp()
        entity = {**fields, "id": _new_id(), "createdAt": now}
        if self.tracks_updates:
            entity["updatedAt"] = now
        await self._write("add", lambda backend: backend.upsert(entity))
        return entity

    async def update(self, entity_id: str, partial: Entity) -> Entity | None:
        """Merge fields into an existing entity. None if it does not exist."""
        fields = self._prepare_update(partial)
        if fields is None:
            return None
        if self.tracks_updates:
            fields["updatedAt"] = self._timestamp()
        return await self._write("update", lambda backend: backend.merge(entity_id, fields))

    async def remove(self, entity_id: str) -> Snapshot:
        """Delete by id (a missing id is fine) and return what remains."""
        await self._write("remove", lambda backend: backend.delete(entity_id))
        return await self.list()

    async def save_all(self, entities: Snapshot) -> None:
        """Upsert entities as given, keeping their ids."""
        await self._write("save", lambda backend: backend.put_many(list(entities)))

    async def clear_all(self) -> None:
        """Drop the Local Store copy and, in cloud mode, every cloud document."""
        try:
            await self._local.clear()
        except Exception as e:
            logger.error("Error clearing %s from local storage: %s", self.label, e)
            raise StorageError(f"Could not clear {self.label}") from e
        if self.cloud_active:
            try:
                await self._cloud.clear()  # type: ignore[union-attr]
            except Exception as e:
                logger.error("Error clearing %s from cloud: %s", self.label, e)

    async def subscribe(self, on_change: OnChange, where: Predicate | None = None) -> Subscription:
        """Deliver full snapshots to `on_change` until the subscription is closed."""

        async def emit(snapshot: Snapshot) -> None:
            try:
                await deliver(on_change, self._shape(snapshot, where))
            except Exception:
                logger.exception("Change callback for %s failed", self.label)

        if self.cloud_active:
            try:
                return await self._cloud.watch(emit)  # type: ignore[union-attr]
            except Exception as e:
                logger.error("Error setting up %s listener, using local storage: %s", self.label, e)
        try:
            return await self._local.watch(emit)
        except Exception as e:
            logger.error("Error reading %s from local storage: %s", self.label, e)
            await emit([])
            return Subscription.noop(label=f"local:{self.local_key}")

    def __repr__(self) -> str:
        backend = "cloud" if self.cloud_active else "local"
        return f"<{type(self).__name__} {self.label} backend={backend}>"
