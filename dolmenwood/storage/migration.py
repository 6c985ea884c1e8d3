"""One-shot copy of a Local Store collection into the Cloud Store.

Runs when a manager's gate has just enabled cloud mode. A non-empty cloud
collection means the copy already happened (or the cloud was seeded some
other way) and nothing is merged or overwritten. Each entity is upserted
under its existing id; failures are logged, remembered under
``<key>__pending_migration`` and retried on the next initialization.
"""

from __future__ import annotations

import logging

from .cloud import CloudCollection
from .local import LocalCollection, LocalStore

logger = logging.getLogger(__name__)


def pending_key(key: str) -> str:
    return f"{key}__pending_migration"


def _record_pending(store: LocalStore, marker: str, failed: list[str]) -> None:
    try:
        if failed:
            store.set(marker, failed)
        else:
            store.remove(marker)
    except Exception as e:
        logger.error("Could not record pending migration %s: %s", marker, e)


async def migrate_local_to_cloud(store: LocalStore, local: LocalCollection, cloud: CloudCollection) -> int:
    """Copy local entities to the cloud. Returns how many were written."""
    marker = pending_key(local.key)
    try:
        pending = store.get(marker)
        if pending is None:
            if not await cloud.is_empty():
                return 0
            entities = await local.read_all()
        else:
            retry = set(pending)
            entities = [e for e in await local.read_all() if e.get("id") in retry]
    except Exception as e:
        logger.error("Error migrating %s: %s", local.key, e)
        return 0

    if not entities:
        _record_pending(store, marker, [])
        return 0

    migrated = 0
    failed: list[str] = []
    for entity in entities:
        entity_id = entity.get("id")
        if not entity_id:
            logger.error("Skipping %s entry without an id during migration", local.key)
            continue
        try:
            await cloud.upsert(entity)
            migrated += 1
        except Exception as e:
            logger.error("Failed to migrate %s/%s: %s", local.key, entity_id, e)
            failed.append(entity_id)

    _record_pending(store, marker, failed)
    logger.info("Migrated %d of %d %s entries to cloud storage", migrated, len(entities), local.key)
    return migrated
