"""
API Tests

Tests for the FastAPI endpoints:
- Root and health
- Games CRUD
- Command submission, summary and history
"""

from fastapi.testclient import TestClient

from netspike.api.main import app


# =============================================================================
# Test Client
# =============================================================================

client = TestClient(app)


def _create(**body):
    response = client.post("/api/games/", json=body)
    assert response.status_code == 200
    return response.json()


# =============================================================================
# Root Endpoint Tests
# =============================================================================

def test_root_endpoint():
    """Test root endpoint returns welcome message"""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "NetSpike" in data["message"]


def test_health_check():
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# =============================================================================
# Game Endpoint Tests
# =============================================================================

def test_create_game():
    data = _create(seed=1)
    assert data["game_id"]
    assert data["game_over"] is False
    assert data["entries"]
    assert len(data["state"]["network"]["nodes"]) >= 8


def test_create_game_with_modifier():
    data = _create(modifier="qubit", seed=1)
    assert data["state"]["modifier"] == "QUBIT"


def test_create_game_unknown_modifier():
    response = client.post("/api/games/", json={"modifier": "BOGUS"})
    assert response.status_code == 400
    assert "BOGUS" in response.json()["error"]


def test_list_modifiers():
    response = client.get("/api/games/modifiers")
    assert response.status_code == 200
    keys = [m["key"] for m in response.json()]
    assert len(keys) == 19
    assert "FLUX" in keys


def test_list_games():
    game_id = _create()["game_id"]
    response = client.get("/api/games/")
    assert response.status_code == 200
    assert game_id in [g["game_id"] for g in response.json()]


def test_get_game():
    game_id = _create()["game_id"]
    response = client.get(f"/api/games/{game_id}")
    assert response.status_code == 200
    assert response.json()["game_id"] == game_id


def test_get_nonexistent_game():
    response = client.get("/api/games/nonexistent-id")
    assert response.status_code == 404
    assert response.json()["error"] == "Game not found"


def test_delete_game():
    game_id = _create()["game_id"]
    assert client.delete(f"/api/games/{game_id}").status_code == 200
    assert client.get(f"/api/games/{game_id}").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404


# =============================================================================
# Command Tests
# =============================================================================

def test_status_command():
    game_id = _create(seed=2)["game_id"]
    response = client.post(f"/api/games/{game_id}/command", json={"line": "status"})
    assert response.status_code == 200
    entries = response.json()["entries"]
    assert entries[0] == {"text": "> status", "type": "input"}
    assert entries[1]["text"].startswith("DATA:")


def test_rejected_command_is_an_error_entry():
    created = _create(seed=2)
    game_id = created["game_id"]
    before = created["state"]["player"]

    response = client.post(f"/api/games/{game_id}/command", json={"line": "hop UNKNOWN"})

    assert response.status_code == 200
    data = response.json()
    assert [e["type"] for e in data["entries"]] == ["input", "error"]
    assert data["state"]["player"] == before


def test_empty_command_is_bad_request():
    game_id = _create()["game_id"]
    response = client.post(f"/api/games/{game_id}/command", json={"line": ""})
    assert response.status_code == 400


def test_command_on_missing_game():
    response = client.post("/api/games/nope/command", json={"line": "scan"})
    assert response.status_code == 404


def test_game_over_returns_summary():
    game_id = _create()["game_id"]
    response = client.post(f"/api/games/{game_id}/command", json={"line": "sudo rm -rf user"})
    data = response.json()
    assert data["game_over"] is True
    assert data["lost"] is True
    assert any("USER DELETED" in e["text"] for e in data["entries"])

    listed = client.get("/api/games/").json()
    assert game_id not in [g["game_id"] for g in listed]
    everything = client.get("/api/games/", params={"active_only": False}).json()
    assert game_id in [g["game_id"] for g in everything]


def test_summary_and_history():
    game_id = _create(seed=5)["game_id"]
    client.post(f"/api/games/{game_id}/command", json={"line": "pass"})

    summary = client.get(f"/api/games/{game_id}/summary")
    assert summary.status_code == 200
    assert summary.json()[0]["text"] == "=== SESSION IN PROGRESS ==="

    history = client.get(f"/api/games/{game_id}/history")
    assert history.status_code == 200
    assert history.json()[0] == {"text": "> pass", "type": "input"}

    last = client.get(f"/api/games/{game_id}/history", params={"limit": 1})
    assert len(last.json()) == 1


def test_summary_only_on_final_turn():
    game_id = _create()["game_id"]
    client.post(f"/api/games/{game_id}/command", json={"line": "sudo rm -rf user"})

    response = client.post(f"/api/games/{game_id}/command", json={"line": "status"})

    entries = response.json()["entries"]
    assert entries[0] == {"text": "> status", "type": "input"}
    assert not any("MISSION" in e["text"] for e in entries)


def test_game_encoding():
    created = _create(seed=3)
    game_id = created["game_id"]

    response = client.get(f"/api/games/{game_id}/encoding")

    assert response.status_code == 200
    data = response.json()
    node_count = len(created["state"]["network"]["nodes"])
    assert len(data["features"]) == 10
    assert len(data["adjacency"]) == node_count
    assert len(data["node_names"]) == node_count
    assert client.get("/api/games/nope/encoding").status_code == 404
