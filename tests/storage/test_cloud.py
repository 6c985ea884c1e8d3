"""Tests for the Redis-backed Cloud Store."""

import asyncio

from dolmenwood.storage import Subscription


async def wait_until(predicate, timeout: float = 3.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.02)


async def test_ping(cloud_store):
    assert await cloud_store.ping() is True


async def test_collection_key_layout(cloud_store):
    col = cloud_store.collection("users/u1/characters")
    assert col.key == "test:users/u1/characters"
    assert col.channel == "test:users/u1/characters:changes"


async def test_upsert_and_read_all(cloud_store):
    col = cloud_store.collection("shared_parties")
    assert await col.is_empty()
    await col.upsert({"id": "p1", "name": "Rangers"})
    await col.upsert({"id": "p1", "name": "Wolves"})
    assert await col.read_all() == [{"id": "p1", "name": "Wolves"}]
    assert not await col.is_empty()


async def test_merge_only_touches_existing(cloud_store):
    col = cloud_store.collection("shared_parties")
    assert await col.merge("ghost", {"name": "x"}) is None
    assert await col.read_all() == []

    await col.upsert({"id": "p1", "name": "Rangers", "description": "d"})
    merged = await col.merge("p1", {"name": "Wolves"})
    assert merged == {"id": "p1", "name": "Wolves", "description": "d"}


async def test_delete_missing_is_fine(cloud_store):
    col = cloud_store.collection("shared_maps")
    await col.delete("nothing")
    assert await col.read_all() == []


async def test_collections_are_isolated(cloud_store):
    await cloud_store.collection("users/a/characters").upsert({"id": "c1"})
    assert await cloud_store.collection("users/b/characters").read_all() == []


async def test_sample_reads_one(cloud_store):
    assert await cloud_store.sample("shared_parties") is None
    await cloud_store.collection("shared_parties").upsert({"id": "p1"})
    assert await cloud_store.sample("shared_parties") == {"id": "p1"}


async def test_watch_pushes_full_snapshots(cloud_store):
    col = cloud_store.collection("shared_maps")
    await col.upsert({"id": "m1"})
    snapshots = []
    sub = await col.watch(snapshots.append)
    try:
        assert snapshots == [[{"id": "m1"}]]
        await col.upsert({"id": "m2"})
        await wait_until(lambda: len(snapshots) >= 2)
        assert sorted(e["id"] for e in snapshots[-1]) == ["m1", "m2"]
    finally:
        await sub.close()


async def test_closed_watch_stops_delivering(cloud_store):
    col = cloud_store.collection("shared_maps")
    snapshots = []
    sub = await col.watch(snapshots.append)
    await sub.close()
    await col.upsert({"id": "m1"})
    await asyncio.sleep(0.2)
    assert snapshots == [[]]


async def test_subscription_as_context_manager(cloud_store):
    col = cloud_store.collection("shared_maps")
    async with await col.watch(lambda snapshot: None) as sub:
        assert isinstance(sub, Subscription)
        assert not sub.closed
    assert sub.closed
