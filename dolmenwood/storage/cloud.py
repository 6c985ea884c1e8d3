"""Cloud Store: per-collection documents in Redis with push updates.

Layout (``prefix`` defaults to "dolmenwood"):

    {prefix}:users/{uid}/characters          hash  id → JSON document
    {prefix}:shared_parties                  hash
    {prefix}:shared_party_members            hash
    {prefix}:shared_maps                     hash
    {prefix}:{path}:changes                  pub/sub channel, one message per write

Every write publishes the touched id on the collection's channel. Listeners
ignore the payload and re-read the whole hash, so callbacks always receive a
complete snapshot. Concurrent writes to the same document are last-write-wins.
"""

from __future__ import annotations

import asyncio
import json
import logging

import redis.asyncio as redis

from dolmenwood.models import Entity

from .base import OnChange, Snapshot, Subscription, deliver

logger = logging.getLogger(__name__)


class CloudStore:
    """Handle to the network document store."""

    def __init__(self, client: redis.Redis, prefix: str = "dolmenwood") -> None:
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "dolmenwood") -> "CloudStore":
        return cls(redis.from_url(url, decode_responses=True), prefix=prefix)

    @property
    def client(self) -> redis.Redis:
        return self._client

    def collection(self, path: str) -> "CloudCollection":
        return CloudCollection(self, path)

    def key_for(self, path: str) -> str:
        return f"{self._prefix}:{path}"

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def sample(self, path: str) -> Entity | None:
        """Fetch at most one document from a collection (cheap reachability probe)."""
        _, pairs = await self._client.hscan(self.key_for(path), count=1)
        for value in pairs.values():
            return json.loads(value)
        return None

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except Exception:
            logger.debug("Failed to close cloud client", exc_info=True)


class CloudCollection:
    """`CollectionBackend` over one Redis hash."""

    name = "cloud"

    def __init__(self, store: CloudStore, path: str) -> None:
        self._store = store
        self.path = path
        self.key = store.key_for(path)
        self.channel = f"{self.key}:changes"

    @property
    def _client(self) -> redis.Redis:
        return self._store.client

    async def _notify(self, entity_id: str) -> None:
        await self._client.publish(self.channel, entity_id)

    async def read_all(self) -> Snapshot:
        values = await self._client.hvals(self.key)
        return [json.loads(v) for v in values]

    async def is_empty(self) -> bool:
        return await self._client.hlen(self.key) == 0

    async def upsert(self, entity: Entity) -> None:
        await self._client.hset(self.key, entity["id"], json.dumps(entity))
        await self._notify(entity["id"])

    async def put_many(self, entities: Snapshot) -> None:
        if not entities:
            return
        await self._client.hset(self.key, mapping={e["id"]: json.dumps(e) for e in entities})
        await self._notify("*")

    async def merge(self, entity_id: str, fields: Entity) -> Entity | None:
        raw = await self._client.hget(self.key, entity_id)
        if raw is None:
            return None
        merged = {**json.loads(raw), **fields}
        await self._client.hset(self.key, entity_id, json.dumps(merged))
        await self._notify(entity_id)
        return merged

    async def delete(self, entity_id: str) -> None:
        removed = await self._client.hdel(self.key, entity_id)
        if removed:
            await self._notify(entity_id)

    async def clear(self) -> None:
        await self._client.delete(self.key)
        await self._notify("*")

    async def watch(self, on_change: OnChange) -> Subscription:
        pubsub = self._client.pubsub()
        await pubsub.subscribe(self.channel)
        try:
            await deliver(on_change, await self.read_all())
        except Exception:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
            raise
        task = asyncio.create_task(self._consume(pubsub, on_change), name=f"watch-{self.key}")
        logger.debug("subscription opened key=%s", self.key)

        async def release() -> None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        return Subscription(release, label=f"cloud:{self.key}")

    async def _consume(self, pubsub, on_change: OnChange) -> None:  # type: ignore[no-untyped-def]
        try:
            while True:
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if not message:
                    await asyncio.sleep(0.01)
                    continue
                try:
                    snapshot = await self.read_all()
                except Exception as e:
                    logger.error("Error in real-time listener for %s: %s", self.key, e)
                    continue
                try:
                    await deliver(on_change, snapshot)
                except Exception:
                    logger.exception("Change callback failed for %s", self.key)
        except asyncio.CancelledError:
            logger.debug("Listener %s cancelled", self.key)
            raise
        finally:
            try:
                await pubsub.unsubscribe(self.channel)
                await pubsub.aclose()
            except Exception:
                logger.debug("Failed to close pubsub for %s", self.key, exc_info=True)
