"""
Tests for the session web server.
"""

from unittest.mock import MagicMock

import pytest
from mafia_allocator.core import GameSession
from mafia_allocator.web import SessionServer

from conftest import FIVE_PLAYERS


@pytest.fixture
def server(game_config, engine):
    """Session server over a seeded session."""
    return SessionServer(game_config, session=GameSession(game_config, engine=engine))


@pytest.fixture
def client(server):
    return server.app.test_client()


@pytest.fixture
def allocated_client(client):
    response = client.post('/api/allocate', json={"player_names": FIVE_PLAYERS, "mafia_count": 2})
    assert response.status_code == 200
    return client


def test_initial_state(client):
    data = client.get('/api/state').get_json()
    assert data["progress"]["stage"] == "input"
    assert data["players"] == []
    assert data["dialog"] is None


def test_validate_endpoint(client):
    data = client.post('/api/validate', json={"player_names": ["A", "B", "C"], "mafia_count": 0}).get_json()
    assert data["is_valid"]
    assert data["requires_confirmation"]
    assert data["edge_case"] == "no_mafia"


def test_allocate_rejects_invalid_configuration(client):
    response = client.post('/api/allocate', json={"player_names": ["A", ""], "mafia_count": 1})
    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_configuration"
    assert client.get('/api/state').get_json()["progress"]["stage"] == "input"


def test_allocate_edge_case_needs_confirmation(client):
    body = {"player_names": ["A", "B", "C"], "mafia_count": 3}

    response = client.post('/api/allocate', json=body)
    assert response.status_code == 409
    assert response.get_json()["requires_confirmation"]

    body["confirmed"] = True
    response = client.post('/api/allocate', json=body)
    assert response.status_code == 200
    assert response.get_json()["progress"]["total_players"] == 3


def test_allocate_returns_state_without_roles(allocated_client):
    data = allocated_client.get('/api/state').get_json()
    assert data["progress"]["stage"] == "revealing"
    assert data["progress"]["current_index"] == 0
    assert len(data["players"]) == 5
    assert all("is_mafia" not in p for p in data["players"])


def test_reveal_and_close(allocated_client):
    response = allocated_client.post('/api/players/0/reveal')
    assert response.status_code == 200
    data = response.get_json()
    assert data["dialog"]["index"] == 0
    assert data["dialog"]["role"] in ("mafia", "villager")
    assert data["players"][0]["revealed"]

    data = allocated_client.post('/api/players/0/close').get_json()
    assert data["advanced"]
    assert data["dialog"] is None
    assert data["progress"]["current_index"] == 1
    assert "is_mafia" in data["players"][0]

    assert not allocated_client.post('/api/players/0/close').get_json()["advanced"]


def test_out_of_order_reveal_is_rejected(allocated_client):
    response = allocated_client.post('/api/players/2/reveal')
    assert response.status_code == 409
    data = response.get_json()
    assert data["error"] == "out_of_order"
    assert data["requested_index"] == 2
    assert data["current_index"] == 0

    state = allocated_client.get('/api/state').get_json()
    assert state["dialog"] is None
    assert not any(p["revealed"] for p in state["players"])


def test_reset_mid_dialog(allocated_client):
    allocated_client.post('/api/players/0/reveal')

    data = allocated_client.post('/api/reset').get_json()

    assert data["player_names"] == FIVE_PLAYERS
    assert data["dialog"] is None
    assert data["progress"]["stage"] == "input"
    assert [p["name"] for p in data["players"]] == FIVE_PLAYERS


def test_reallocate_reuses_session_inputs(allocated_client):
    allocated_client.post('/api/players/0/reveal')
    allocated_client.post('/api/players/0/close')

    response = allocated_client.post('/api/reallocate')

    assert response.status_code == 200
    data = response.get_json()
    assert data["progress"]["current_index"] == 0
    assert not any(p["revealed"] for p in data["players"])


def test_reallocate_without_players(client):
    response = client.post('/api/reallocate')
    assert response.status_code == 400


def test_socket_clients_receive_public_state(server, client):
    socket_client = server.socketio.test_client(server.app)
    received = socket_client.get_received()
    assert received[0]["name"] == "session_state"
    assert received[0]["args"][0]["session_state"]["progress"]["stage"] == "input"

    client.post('/api/allocate', json={"player_names": FIVE_PLAYERS, "mafia_count": 2})
    client.post('/api/players/0/reveal')

    received = socket_client.get_received()
    states = [r["args"][0]["session_state"] for r in received if r["name"] == "session_state"]
    assert states
    assert states[-1]["players"][0]["revealed"]
    for state in states:
        assert all("is_mafia" not in p for p in state["players"])

    socket_client.disconnect()
    assert server.clients_connected == 0


def test_socket_connect_reads_state_under_lock(server):
    server._lock = MagicMock()
    server.session.allocate(FIVE_PLAYERS, 2)

    socket_client = server.socketio.test_client(server.app)

    server._lock.__enter__.assert_called()
    state = socket_client.get_received()[0]["args"][0]["session_state"]
    assert state["progress"]["stage"] == "revealing"
    assert [p["name"] for p in state["players"]] == FIVE_PLAYERS
    socket_client.disconnect()
