"""Tests for Dashboard wiring: init order, identity changes, seeding."""

from dolmenwood.config import Settings
from dolmenwood.dashboard import Dashboard
from dolmenwood.storage import LocalAuthService, StaticIdentity


async def test_anonymous_local_only(local_store) -> None:
    dashboard = Dashboard(local_store)
    status = await dashboard.init()
    assert status == {"characters": False, "parties": False, "party_members": False, "maps": False}
    assert dashboard.sync_status == "Not logged in"


async def test_signed_in_with_cloud(local_store, cloud_store) -> None:
    dashboard = Dashboard(local_store, cloud_store, StaticIdentity("u1"))
    status = await dashboard.init()
    assert all(status.values())
    assert dashboard.sync_status == "Cloud sync enabled"


async def test_anonymous_with_cloud_shares_but_keeps_characters_local(local_store, cloud_store) -> None:
    dashboard = Dashboard(local_store, cloud_store)
    status = await dashboard.init()
    assert status["characters"] is False
    assert status["parties"] is True
    assert status["maps"] is True


async def test_signed_in_offline(local_store) -> None:
    dashboard = Dashboard(local_store, None, StaticIdentity("u1"))
    await dashboard.init()
    assert dashboard.sync_status == "Offline mode"


async def test_init_follows_identity(local_store, cloud_store) -> None:
    auth = LocalAuthService(local_store)
    dashboard = Dashboard(local_store, cloud_store, auth)
    await dashboard.init()
    assert dashboard.identity is None

    user = await auth.sign_in("a@b.c", "pw")
    await dashboard.init()
    assert dashboard.identity == user["uid"]
    assert dashboard.characters.cloud_active

    await dashboard.characters.add({"name": "Brion"})
    assert len(await cloud_store.collection(f"users/{user['uid']}/characters").read_all()) == 1


async def test_load_characters_seeds_once(local_store) -> None:
    dashboard = Dashboard(local_store, None, StaticIdentity("u1"))
    await dashboard.init()
    first = await dashboard.load_characters()
    assert sorted(c["name"] for c in first) == ["Brion Blackthorn", "Gilly Dagwood", "Mudwort Mosfoot"]
    assert len({c["id"] for c in first}) == 3
    assert all(c["userId"] == "u1" for c in first)
    assert len(await dashboard.load_characters()) == 3


async def test_load_characters_keeps_existing(local_store) -> None:
    dashboard = Dashboard(local_store)
    await dashboard.init()
    await dashboard.characters.add({"name": "Own"})
    assert [c["name"] for c in await dashboard.load_characters()] == ["Own"]


async def test_health(local_store, cloud_store) -> None:
    assert (await Dashboard(local_store).health()).status == "offline"
    assert (await Dashboard(local_store, cloud_store).health()).status == "connected"


def test_from_settings(local_store) -> None:
    dashboard = Dashboard.from_settings(Settings(data_dir=local_store.data_dir, health_timeout=2.0))
    assert dashboard.cloud is None
    assert dashboard.context.timeout == 2.0
    assert dashboard.local.data_dir == local_store.data_dir


def test_managers_share_one_context(local_store) -> None:
    dashboard = Dashboard(local_store, None, StaticIdentity("u1"))
    assert {m.context for m in dashboard.managers().values()} == {dashboard.context}


async def test_seeded_rosters_do_not_share_ids(local_store, cloud_store) -> None:
    alice = Dashboard(local_store, cloud_store, StaticIdentity("alice"))
    bob = Dashboard(local_store, cloud_store, StaticIdentity("bob"))
    await alice.init()
    await bob.init()
    alice_brion = next(c for c in await alice.load_characters() if c["name"] == "Brion Blackthorn")
    bob_brion = next(c for c in await bob.load_characters() if c["name"] == "Brion Blackthorn")
    assert alice_brion["id"] != bob_brion["id"]

    await alice.characters.update(alice_brion["id"], {"partyName": "Rangers"})
    await bob.characters.update(bob_brion["id"], {"partyName": "Wolves"})
    assert [m["id"] for m in await alice.party_members.members_of("Rangers")] == [alice_brion["id"]]

    await bob.characters.remove(bob_brion["id"])
    assert [m["id"] for m in await alice.party_members.members_of("Rangers")] == [alice_brion["id"]]
    assert await bob.party_members.members_of("Wolves") == []


async def test_reinit_listeners(local_store) -> None:
    dashboard = Dashboard(local_store)
    calls = []

    async def listener() -> None:
        calls.append(dashboard.identity)

    async def broken() -> None:
        raise RuntimeError("listener broke")

    sub = await dashboard.on_reinit(listener)
    await dashboard.on_reinit(broken)
    await dashboard.init()
    assert calls == [None]

    await sub.close()
    await dashboard.init()
    assert calls == [None]
