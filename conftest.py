import shutil
from pathlib import Path
from unittest.mock import AsyncMock

import fakeredis
import fakeredis.aioredis
import pytest

from dolmenwood.storage import CloudCollection, CloudStore, LocalStore, StaticIdentity, StorageContext

TEST_DATA_DIR = Path("data-tests")

CLOUD_METHODS = ("read_all", "is_empty", "upsert", "put_many", "merge", "delete", "clear", "watch")


@pytest.fixture(autouse=True)
def local_store():
    """Wipe data-tests/ and hand out a fresh Local Store for every test."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    yield LocalStore(TEST_DATA_DIR)
    # leave data-tests around after tests for inspection; CI can ignore it


@pytest.fixture
async def cloud_store():
    client = fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    cloud = CloudStore(client, prefix="test")
    yield cloud
    await cloud.close()


@pytest.fixture
def make_context(local_store: LocalStore):
    """Build a StorageContext; pass cloud=None for local-only."""

    def _make(cloud: CloudStore | None = None, uid: str | None = "user-1") -> StorageContext:
        return StorageContext.resolve(local_store, cloud, StaticIdentity(uid), timeout=1.0)

    return _make


@pytest.fixture
def broken_cloud(monkeypatch: pytest.MonkeyPatch):
    """Cloud reachable at init time (ping works) but every collection call fails."""
    for name in CLOUD_METHODS:
        monkeypatch.setattr(CloudCollection, name, AsyncMock(side_effect=ConnectionError("cloud down")))


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch):
    """Deterministic, strictly increasing timestamps for manager writes."""
    ticks = (f"2024-05-01T12:00:{i:02d}+00:00" for i in range(60))
    monkeypatch.setattr("dolmenwood.storage.manager._now", lambda: next(ticks))
