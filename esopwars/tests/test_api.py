"""
Tests for the FastAPI application.

Tests:
- Session endpoints
- Action submission and structured rejections
- Legal actions, tick, undo, winners
- WebSocket broadcast
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from ..api.app import create_app
from ..api.service import APIService

API = "/api/v1/sessions"


@pytest.fixture
def service():
    return APIService()


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


@pytest.fixture
def session_id(client):
    """A two-team session with no bots."""
    response = client.post(API, json={"team_count": 2, "random_seed": 5})
    return response.json()["session_id"]


def register(client, session_id, slot, name):
    return client.post(
        f"{API}/{session_id}/actions",
        json={"action_type": "register_team", "actor": slot, "payload": {"name": name}},
    )


class TestSystemEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/api/docs"


class TestSessionEndpoints:
    """Tests for the session lifecycle over HTTP."""

    def test_create(self, client):
        response = client.post(API, json={"team_count": 3, "bot_slots": [1, 2], "random_seed": 1})

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "active"
        assert data["bot_slots"] == [1, 2]
        assert len(data["teams"]) == 3
        assert data["phase"] == "registration"

    def test_create_rejects_bad_team_count(self, client):
        assert client.post(API, json={"team_count": 9}).status_code == 422

    def test_create_rejects_unknown_personality(self, client):
        response = client.post(
            API, json={"team_count": 2, "bot_slots": [0], "personalities": {"0": "reckless"}},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_get_and_list(self, client, session_id):
        assert client.get(f"{API}/{session_id}").json()["session_id"] == session_id
        listing = client.get(API).json()
        assert session_id in listing["sessions"]
        assert listing["count"] == 1

    def test_state(self, client, session_id):
        data = client.get(f"{API}/{session_id}/state").json()

        assert data["action_counter"] == 0
        assert data["document"]["game_id"] == session_id
        assert data["current_card"] is None

    def test_delete(self, client, session_id):
        response = client.delete(f"{API}/{session_id}")
        assert response.json()["status"] == "abandoned"

        missing = client.get(f"{API}/{session_id}/state")
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "SESSION_NOT_FOUND"
        assert missing.json()["details"] == {"session_id": session_id}

    def test_bot_only_session_finishes(self, client):
        """With no human seat the driver plays the whole game on create."""
        created = client.post(API, json={"team_count": 2, "bot_slots": [0, 1], "random_seed": 3})
        session_id = created.json()["session_id"]

        assert created.json()["status"] == "game_over"
        winners = client.get(f"{API}/{session_id}/winners").json()
        assert winners["game_over"] is True
        assert winners["best_founder"] is not None


class TestActionEndpoints:
    """Tests for action submission."""

    def test_accepted(self, client, session_id):
        response = register(client, session_id, 0, "Alpha")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["action_counter"] == 1
        assert "Alpha" in " ".join(data["changes"])

    def test_out_of_turn(self, client, session_id):
        response = register(client, session_id, 1, "Beta")

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "OUT_OF_TURN"
        assert data["details"]["phase"] == "registration"

    def test_unknown_action_type(self, client, session_id):
        response = client.post(f"{API}/{session_id}/actions", json={"action_type": "steal"})
        assert response.status_code == 422

    def test_bots_follow_human(self, client):
        """Bots act before the response returns."""
        created = client.post(API, json={"team_count": 3, "bot_slots": [1, 2], "random_seed": 4})
        session_id = created.json()["session_id"]

        data = register(client, session_id, 0, "Alpha").json()

        assert len(data["bot_changes"]) >= 2
        state = client.get(f"{API}/{session_id}/state").json()
        assert all(team["is_registered"] for team in state["teams"])

    def test_legal_actions(self, client, session_id):
        data = client.get(f"{API}/{session_id}/legal-actions", params={"team": 0}).json()

        assert data["count"] == 1
        assert data["actions"][0]["action_type"] == "register_team"
        assert client.get(f"{API}/{session_id}/legal-actions", params={"team": 1}).json()["count"] == 0

    def test_tick_without_window(self, client, session_id):
        data = client.post(f"{API}/{session_id}/tick").json()

        assert data["expired"] is False
        assert data["action"] is None

    def test_undo(self, client, session_id):
        register(client, session_id, 0, "Alpha")

        response = client.post(f"{API}/{session_id}/undo", json={"action_counter": 0})

        assert response.status_code == 200
        assert response.json()["action_counter"] == 0
        assert response.json()["teams"][0]["is_registered"] is False

    def test_undo_unknown_counter(self, client, session_id):
        response = client.post(f"{API}/{session_id}/undo", json={"action_counter": 99})

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_HISTORY"

    def test_winners_before_exit(self, client, session_id):
        data = client.get(f"{API}/{session_id}/winners").json()

        assert data["game_over"] is False
        assert data["founder_ranking"] == []


class TestWebSocket:
    """Tests for the snapshot broadcast."""

    def test_initial_snapshot_and_ping(self, client, session_id):
        with client.websocket_connect(f"{API}/{session_id}/ws") as ws:
            first = ws.receive_json()
            assert first["type"] == "state_update"
            assert first["payload"]["session_id"] == session_id

            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    def test_commit_is_broadcast(self, client, session_id):
        with client.websocket_connect(f"{API}/{session_id}/ws") as ws:
            ws.receive_json()

            register(client, session_id, 0, "Alpha")

            message = ws.receive_json()
            assert message["type"] == "state_update"
            assert message["payload"]["action_counter"] == 1

    def test_bad_message(self, client, session_id):
        with client.websocket_connect(f"{API}/{session_id}/ws") as ws:
            ws.receive_json()
            ws.send_text("not json")
            assert ws.receive_json()["type"] == "error"

    def test_unknown_session(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(f"{API}/missing/ws") as ws:
                ws.receive_json()
