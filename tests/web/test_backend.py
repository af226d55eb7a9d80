"""
Tests for the FastAPI backend.
"""

import importlib.util
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


BACKEND = Path(__file__).resolve().parents[2] / "web" / "backend" / "main.py"


@pytest.fixture(scope="module")
def backend():
    spec = importlib.util.spec_from_file_location("eliza_web_backend", BACKEND)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def client(backend):
    return TestClient(backend.app)


def _open(client):
    response = client.post("/api/sessions")
    assert response.status_code == 200
    return response.json()


class TestBackend:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_open_session_greets(self, client):
        body = _open(client)

        assert body["session_id"]
        assert body["greeting"]

    def test_chat(self, client):
        session_id = _open(client)["session_id"]

        response = client.post(f"/api/chat/{session_id}", json={"message": "I am sad"})

        assert response.status_code == 200
        body = response.json()
        assert body["reply"] == "I am sorry to hear that you are sad."
        assert body["ended"] is False

    def test_sessions_are_independent(self, client):
        a = _open(client)["session_id"]
        b = _open(client)["session_id"]

        client.post(f"/api/chat/{a}", json={"message": "I am sad"})
        reply = client.post(f"/api/chat/{b}", json={"message": "I am sad"}).json()["reply"]

        assert reply == "I am sorry to hear that you are sad."

    def test_quit_ends_session(self, client):
        session_id = _open(client)["session_id"]

        body = client.post(f"/api/chat/{session_id}", json={"message": "bye"}).json()

        assert body["ended"] is True
        assert body["reply"].startswith("Goodbye")
        assert client.post(f"/api/chat/{session_id}", json={"message": "hi"}).status_code == 404

    @pytest.mark.parametrize("message", ["", "   ", "x" * 5001])
    def test_rejects_bad_messages(self, client, message):
        session_id = _open(client)["session_id"]

        response = client.post(f"/api/chat/{session_id}", json={"message": message})

        assert response.status_code == 422

    def test_unknown_session(self, client):
        assert client.post("/api/chat/nope", json={"message": "hi"}).status_code == 404
        assert client.get("/api/sessions/nope/stats").status_code == 404
        assert client.delete("/api/sessions/nope").status_code == 404

    def test_stats_and_close(self, client):
        session_id = _open(client)["session_id"]
        client.post(f"/api/chat/{session_id}", json={"message": "my dog is sick"})

        stats = client.get(f"/api/sessions/{session_id}/stats").json()["stats"]
        assert stats["turns"] == 1
        assert stats["keyword_hits"] == {"my": 1}

        assert client.delete(f"/api/sessions/{session_id}").status_code == 204
        assert client.get(f"/api/sessions/{session_id}/stats").status_code == 404
