"""
Tests for the HTTP surface and per-session isolation.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from devtask import __version__
from devtask.api import session_store
from devtask.api.session_store import SessionStore
from devtask.engine.agent import DevTaskAgent
from devtask.main import app


@pytest.fixture
def llm():
    client = MagicMock()
    client.call_function = AsyncMock(return_value={"intent_type": "chat", "action": "respond"})
    client.chat = AsyncMock(return_value="Olá!")
    return client


@pytest.fixture
def client(tmp_path, llm, monkeypatch):
    (tmp_path / "a.txt").write_text("antigo\n")
    store = SessionStore(agent_factory=lambda: DevTaskAgent(llm=llm, root=tmp_path))
    monkeypatch.setattr(session_store, "store", store)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__}


def test_chat_opens_session(client):
    response = client.post("/api/chat", json={"message": "oi"})
    assert response.status_code == 200
    data = response.json()
    assert data["content"] == "Olá!"
    assert data["role"] == "assistant"
    assert data["session_id"]
    assert data["intent"] == {"type": "chat", "action": "respond", "parameters": {}}


def test_session_keeps_context(client):
    first = client.post("/api/chat", json={"message": "liste os arquivos"}).json()
    session_id = first["session_id"]
    assert first["content"].startswith('Arquivos em ".":')

    state = client.get(f"/api/chat/{session_id}/state").json()
    assert state["state"]["current_directory"] == "."
    assert state["state"]["last_action"] == "list"
    assert state["references"]["directory"][0]["key"] == "."


def test_sessions_are_isolated(client, llm):
    llm.call_function.return_value = {
        "intent_type": "file",
        "action": "modify",
        "parameters": {"path": "a.txt", "content": "novo\n"},
    }
    first = client.post("/api/chat", json={"message": "altere a.txt"}).json()
    second = client.post("/api/chat", json={"message": "altere a.txt"}).json()

    assert first["session_id"] != second["session_id"]
    assert first["content"].startswith("✅ Propus a modificação")
    assert second["content"].startswith("✅ Propus a modificação")

    changes = client.get(f"/api/chat/{first['session_id']}/changes").json()
    assert changes["pending"] is True
    assert changes["changes"] == [{"kind": "modify", "path": "a.txt"}]
    assert "+novo" in changes["preview"]


def test_handler_failure_is_not_a_500(client, llm):
    llm.chat.side_effect = RuntimeError("quebrou")
    response = client.post("/api/chat", json={"message": "oi"})
    assert response.status_code == 200
    assert response.json()["content"] == "Desculpe, ocorreu um erro ao processar sua solicitação: quebrou"


def test_clear_session(client):
    session_id = client.post("/api/chat", json={"message": "oi"}).json()["session_id"]

    response = client.post(f"/api/chat/{session_id}/clear")
    assert response.json()["success"] is True

    state = client.get(f"/api/chat/{session_id}/state").json()
    assert state["state"]["last_operation"] is None


def test_close_session(client):
    session_id = client.post("/api/chat", json={"message": "oi"}).json()["session_id"]
    assert client.delete(f"/api/chat/{session_id}").status_code == 200
    assert client.get(f"/api/chat/{session_id}/state").status_code == 404


def test_unknown_session(client):
    assert client.get("/api/chat/nope/state").status_code == 404
    assert client.get("/api/chat/nope/changes").status_code == 404
    assert client.post("/api/chat/nope/clear").status_code == 404


def test_explicit_session_id_is_reused(client):
    client.post("/api/chat", json={"message": "oi", "session_id": "abc"})
    client.post("/api/chat", json={"message": "tudo bem?", "session_id": "abc"})
    assert len(session_store.get_session_store()) == 1


class TestSessionStore:
    """Session cap and least-recently-used eviction."""

    @pytest.fixture
    def store(self):
        return SessionStore(agent_factory=MagicMock, max_sessions=2)

    def test_oldest_idle_session_is_evicted(self, store):
        store.get_or_create("a")
        store.get_or_create("b")
        store.get("a")
        store.get_or_create("c")

        assert len(store) == 2
        assert store.get("b") is None
        assert store.get("a") is not None
        assert store.get("c") is not None

    def test_anonymous_sessions_are_capped(self, store):
        for _ in range(5):
            store.get_or_create()
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_busy_session_is_kept(self, store):
        _, busy = store.get_or_create("a")
        store.get_or_create("b")

        async with busy.lock:
            store.get_or_create("c")

        assert store.get("a") is busy
        assert store.get("b") is None
