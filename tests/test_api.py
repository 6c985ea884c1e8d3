"""HTTP and WebSocket surface, local-only deployment."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from backend.app import create_app
from dolmenwood.chat import ChatError
from dolmenwood.config import Settings
from dolmenwood.storage import LocalCollection


@pytest.fixture
def settings(local_store) -> Settings:
    return Settings(data_dir=local_store.data_dir, github_token="secret")


@pytest.fixture
def client(settings: Settings):
    with TestClient(create_app(settings)) as c:
        yield c


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

def test_health(client: TestClient) -> None:
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["storage"]["status"] == "offline"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class TestAuth:
    def test_me_signed_out(self, client: TestClient) -> None:
        assert client.get("/api/auth/me").json() == {"user": None, "syncStatus": "Not logged in"}

    def test_sign_in_and_out(self, client: TestClient) -> None:
        r = client.post("/api/auth/sign-in", json={"email": "a@b.c", "password": "pw"})
        assert r.status_code == 200
        uid = r.json()["uid"]
        me = client.get("/api/auth/me").json()
        assert me["user"]["uid"] == uid
        assert me["syncStatus"] == "Offline mode"

        assert client.post("/api/auth/sign-out").json() == {"ok": True}
        assert client.get("/api/auth/me").json()["user"] is None

    def test_sign_up(self, client: TestClient) -> None:
        r = client.post("/api/auth/sign-up", json={"email": "a@b.c", "password": "pw"})
        assert r.status_code == 201


# ---------------------------------------------------------------------------
# Characters and party rosters
# ---------------------------------------------------------------------------

class TestCharacters:
    def test_list_seeds_examples(self, client: TestClient) -> None:
        r = client.get("/api/characters")
        assert r.status_code == 200
        assert len(r.json()) == 3

    def test_crud_and_roster(self, client: TestClient) -> None:
        r = client.post("/api/characters", json={"name": "Brion", "partyName": "Rangers"})
        assert r.status_code == 201
        cid = r.json()["id"]

        assert client.get(f"/api/characters/{cid}").json()["name"] == "Brion"
        roster = client.get("/api/parties/Rangers/members").json()
        assert [m["id"] for m in roster] == [cid]

        r = client.patch(f"/api/characters/{cid}", json={"partyName": ""})
        assert r.status_code == 200
        assert client.get("/api/parties/Rangers/members").json() == []

        assert client.delete(f"/api/characters/{cid}").json() == {"ok": True}
        assert client.get(f"/api/characters/{cid}").status_code == 404

    def test_patch_missing(self, client: TestClient) -> None:
        assert client.patch("/api/characters/ghost", json={"name": "x"}).status_code == 404


# ---------------------------------------------------------------------------
# Parties
# ---------------------------------------------------------------------------

class TestParties:
    def test_create_rename_delete(self, client: TestClient) -> None:
        r = client.post("/api/parties", json={"name": "Rangers of Dolmenwood"})
        assert r.status_code == 201
        party = r.json()
        assert party["description"] == ""

        r = client.patch(f"/api/parties/{party['id']}", json={"name": "The Wolves"})
        assert r.json()["name"] == "The Wolves"
        assert r.json()["id"] == party["id"]

        client.delete(f"/api/parties/{party['id']}")
        assert client.get("/api/parties").json() == []

    def test_invalid_party_is_422(self, client: TestClient) -> None:
        assert client.post("/api/parties", json={"name": ""}).status_code == 422
        assert client.post("/api/parties", json={"name": "x" * 101}).status_code == 422

    def test_patch_missing_party(self, client: TestClient) -> None:
        assert client.patch("/api/parties/ghost", json={"name": "x"}).status_code == 404

    def test_unsaved_write_is_500(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(LocalCollection, "upsert", AsyncMock(side_effect=OSError("disk full")))
        r = client.post("/api/parties", json={"name": "Rangers"})
        assert r.status_code == 500
        assert "parties" in r.json()["detail"]


# ---------------------------------------------------------------------------
# Maps
# ---------------------------------------------------------------------------

def test_maps(client: TestClient) -> None:
    r = client.post("/api/maps", json={"name": "Hag's Addle", "imageData": "data:image/png;base64,AA"})
    assert r.status_code == 201
    map_id = r.json()["id"]
    assert [m["id"] for m in client.get("/api/maps").json()] == [map_id]
    client.delete(f"/api/maps/{map_id}")
    assert client.get("/api/maps").json() == []


# ---------------------------------------------------------------------------
# Chat proxy
# ---------------------------------------------------------------------------

class TestAsk:
    def test_answer(self, client: TestClient) -> None:
        with patch("dolmenwood.chat.ChatClient.ask", AsyncMock(return_value="Seven moons.")):
            r = client.post("/api/copilot/ask", json={"question": "How many moons?"})
        assert r.status_code == 200
        assert r.json()["answer"] == "Seven moons."
        assert "timestamp" in r.json()

    @pytest.mark.parametrize("body", [{}, {"question": ""}, {"question": 42}, {"question": "x" * 2001}])
    def test_bad_question(self, client: TestClient, body: dict) -> None:
        assert client.post("/api/copilot/ask", json=body).status_code == 400

    def test_upstream_error(self, client: TestClient) -> None:
        with patch("dolmenwood.chat.ChatClient.ask", AsyncMock(side_effect=ChatError("down", status_code=503))):
            r = client.post("/api/copilot/ask", json={"question": "q"})
        assert r.status_code == 503

    def test_missing_token(self, local_store) -> None:
        with TestClient(create_app(Settings(data_dir=local_store.data_dir))) as c:
            assert c.post("/api/copilot/ask", json={"question": "q"}).status_code == 500


# ---------------------------------------------------------------------------
# WebSocket stream
# ---------------------------------------------------------------------------

class TestStream:
    def test_initial_snapshot(self, client: TestClient) -> None:
        client.post("/api/parties", json={"name": "Rangers"})
        with client.websocket_connect("/api/ws/parties") as ws:
            snapshot = ws.receive_json()
        assert [p["name"] for p in snapshot] == ["Rangers"]

    def test_party_filter(self, client: TestClient) -> None:
        client.post("/api/characters", json={"name": "A", "partyName": "Rangers"})
        client.post("/api/characters", json={"name": "B", "partyName": "Wolves"})
        with client.websocket_connect("/api/ws/party_members?party=Wolves") as ws:
            snapshot = ws.receive_json()
        assert [m["name"] for m in snapshot] == ["B"]

    def test_rebinds_after_sign_in(self, client: TestClient) -> None:
        client.post("/api/characters", json={"name": "Brion"})
        with client.websocket_connect("/api/ws/characters") as ws:
            assert [c["name"] for c in ws.receive_json()] == ["Brion"]
            client.post("/api/auth/sign-in", json={"email": "a@b.c", "password": "pw"})
            assert [c["name"] for c in ws.receive_json()] == ["Brion"]
            client.post("/api/auth/sign-out")
            assert [c["name"] for c in ws.receive_json()] == ["Brion"]

    def test_unknown_collection(self, client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/api/ws/spells"):
                pass
