"""
API contract tests for the League Live API.

These tests validate status codes and the response envelope of the REST
endpoints and the message flow of the /ws/live WebSocket. The store is
an in-memory fake placed on app.state and injected through
app.dependency_overrides; no database server is needed.
"""

from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from conftest import FakeDB, scoring_script
from league_live.api.dependencies import get_db
from league_live.api.main import create_app
from league_live.api.rate_limit import reset_rate_limiters
from league_live.core.config import get_settings
from league_live.errors import Conflict, StoreUnavailable

VALID_EVENT = {"game_id": 1, "team_id": 10, "player_id": 7, "sport": "FOOTBALL", "points": 6}


@pytest.fixture
def fake_db():
    return FakeDB()


@pytest.fixture
def client(fake_db):
    """Sync test client with the fake store; runs the app lifespan."""
    app = create_app()
    app.state.db = fake_db
    app.dependency_overrides[get_db] = lambda: fake_db

    with TestClient(app) as c:
        yield c


def assert_error(response, status_code: int, message: str | None = None):
    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    if message is not None:
        assert body["message"] == message
    return body


# =========================================================================
# Health and documentation
# =========================================================================


class TestHealthEndpoints:
    def test_health_basic(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["message"] == "Sports League API is running"
        assert data["version"] == "1.0.0"
        assert "timestamp" in data

    def test_health_db(self, client):
        r = client.get("/health/db")
        assert r.status_code == 200
        assert r.json()["message"] == "Database connected"

    def test_health_db_without_pool(self, client):
        client.app.state.db = None
        assert_error(client.get("/health/db"), 503, "Database connection failed")

    def test_health_live(self, client):
        r = client.get("/health/live")
        assert r.json()["data"] == {"rooms": {}, "connections": 0}

    def test_process_time_header(self, client):
        r = client.get("/health")
        assert r.headers["X-Process-Time"].endswith("ms")


class TestDocumentation:
    def test_lists_every_resource(self, client):
        r = client.get("/api")
        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert set(body["endpoints"]) == {"teams", "players", "games", "events", "websocket"}
        assert "/ws/live" in body["endpoints"]["websocket"]
        assert "POST /api/events" in body["endpoints"]["events"]

    def test_unknown_route(self, client):
        assert_error(client.get("/api/nope"), 404, "Route /api/nope not found")


# =========================================================================
# Score events
# =========================================================================


class TestScoreEvents:
    def test_create_event(self, client, fake_db):
        fake_db.conn.script[:] = scoring_script()

        r = client.post("/api/events", json=VALID_EVENT)

        assert r.status_code == 201
        assert r.json() == {
            "success": True,
            "data": {"id": 99},
            "message": "Score event created successfully",
        }
        assert fake_db.commits == 1

    def test_invalid_sport_rejected_before_store(self, client, fake_db):
        r = client.post("/api/events", json={**VALID_EVENT, "sport": "HOCKEY"})

        body = assert_error(r, 400, "Validation error")
        assert body["error"].startswith("sport")
        assert fake_db.calls == []

    def test_negative_points_rejected_before_store(self, client, fake_db):
        r = client.post("/api/events", json={**VALID_EVENT, "points": -3})

        assert_error(r, 400, "Validation error")
        assert fake_db.calls == []

    def test_missing_field(self, client, fake_db):
        r = client.post("/api/events", json={"game_id": 1, "sport": "FOOTBALL"})

        body = assert_error(r, 400)
        assert "team_id" in body["error"]

    def test_unknown_game(self, client, fake_db):
        fake_db.conn.script[:] = [("SELECT id, sport, team1_id, team2_id FROM games", [])]

        r = client.post("/api/events", json={**VALID_EVENT, "game_id": 404})

        body = assert_error(r, 404, "Game not found")
        assert body["error"] == "Game with ID 404"
        assert fake_db.rollbacks == 1

    def test_team_not_in_game(self, client, fake_db):
        fake_db.conn.script[:] = scoring_script()

        r = client.post("/api/events", json={**VALID_EVENT, "team_id": 30})

        assert_error(r, 400, "Team is not playing in this game")
        assert fake_db.commits == 0

    def test_list_limit_bounds(self, client):
        assert_error(client.get("/api/events?limit=0"), 400)

    def test_delete_missing_event(self, client):
        assert_error(client.delete("/api/events/5"), 404, "Score event not found")


# =========================================================================
# Teams, players and games
# =========================================================================


class TestResources:
    def test_list_teams(self, client, fake_db):
        fake_db.conn.script[:] = [
            ("FROM teams t", [{"id": 1, "name": "Hawks", "leader_id": None, "leader_name": None, "player_count": 0}])
        ]

        r = client.get("/api/teams")

        assert r.status_code == 200
        assert r.json()["data"][0]["name"] == "Hawks"

    def test_team_not_found(self, client):
        assert_error(client.get("/api/teams/5"), 404, "Team not found")

    def test_duplicate_team(self, client, fake_db):
        fake_db.conn.script[:] = [("INSERT INTO teams", Conflict("Duplicate entry not allowed"))]

        assert_error(client.post("/api/teams", json={"name": "Hawks"}), 409, "Duplicate entry not allowed")

    def test_empty_team_name(self, client, fake_db):
        assert_error(client.post("/api/teams", json={"name": ""}), 400, "Validation error")
        assert fake_db.calls == []

    def test_update_missing_player(self, client):
        r = client.put("/api/players/8", json={"name": "Alice", "team_id": 1})
        assert_error(r, 404, "Player not found")

    def test_overwrite_missing_stat(self, client):
        r = client.put("/api/players/8/stats/2", json={"points": 3})
        assert_error(r, 404, "Player stat not found")

    def test_game_with_same_team_twice(self, client, fake_db):
        r = client.post(
            "/api/games",
            json={"sport": "FOOTBALL", "scheduled_time": "2025-03-01T18:00:00Z", "team1_id": 1, "team2_id": 1},
        )
        assert_error(r, 400, "Validation error")
        assert fake_db.calls == []

    def test_invalid_status(self, client):
        assert_error(client.put("/api/games/1/status", json={"status": "PAUSED"}), 400)

    def test_live_games(self, client, fake_db):
        r = client.get("/api/games/live")

        assert r.json() == {"success": True, "data": []}
        _, params = fake_db.calls[0]
        assert params == ("LIVE",)

    def test_delete_missing_game(self, client):
        assert_error(client.delete("/api/games/3"), 404, "Game not found")


class TestStoreFailures:
    def test_store_unavailable(self, client, fake_db):
        fake_db.conn.script[:] = [("FROM teams", StoreUnavailable("Database connection failed"))]

        assert_error(client.get("/api/teams"), 503, "Database connection failed")

    def test_no_pool_at_startup(self, client):
        client.app.dependency_overrides.clear()
        client.app.state.db = None

        assert_error(client.get("/api/teams"), 503, "Database connection failed")


class TestRateLimiting:
    def test_events_policy(self, client, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
        monkeypatch.setenv("RATE_LIMIT_EVENTS_REQUESTS", "2")
        get_settings.cache_clear()
        reset_rate_limiters()

        assert client.get("/api/events").status_code == 200
        second = client.get("/api/events")
        assert second.headers["X-RateLimit-Remaining"] == "0"

        r = client.get("/api/events")
        body = assert_error(r, 429, "Too many score events from this IP, please try again later.")
        assert "Retry after" in body["error"]
        assert int(r.headers["Retry-After"]) > 0

        # Other endpoints only count against the general policy
        assert client.get("/api/teams").status_code == 200


# =========================================================================
# WebSocket live feed
# =========================================================================


class TestLiveFeed:
    def test_connected_greeting(self, client):
        with client.websocket_connect("/ws/live") as ws:
            message = ws.receive_json()
            assert message["event"] == "connected"
            assert "timestamp" in message["data"]

    def test_live_status_lists_rooms(self, client):
        with client.websocket_connect("/ws/live") as ws:
            ws.receive_json()
            ws.send_json({"event": "join_game", "game_id": 4})
            ws.send_json({"event": "get_live_status"})

            status = ws.receive_json()
            assert status["event"] == "live_status"
            assert status["data"]["rooms"] == ["game_4", "live"]

            ws.send_json({"event": "leave_game", "game_id": 4})
            ws.send_json({"event": "get_live_status"})
            assert ws.receive_json()["data"]["rooms"] == ["live"]

    def test_bad_messages(self, client):
        with client.websocket_connect("/ws/live") as ws:
            ws.receive_json()

            ws.send_text("not json")
            assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid JSON"}}

            ws.send_json({"event": "join_game", "game_id": "four"})
            assert ws.receive_json()["event"] == "error"

            ws.send_json({"event": "dance"})
            assert ws.receive_json()["data"]["message"] == "Unknown event: dance"

            ws.send_bytes(b"\xff\x00")
            assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid JSON"}}

            # The socket survives malformed input
            ws.send_json({"event": "get_live_status"})
            assert ws.receive_json()["event"] == "live_status"

    def test_binary_frames_accepted(self, client):
        with client.websocket_connect("/ws/live") as ws:
            ws.receive_json()

            ws.send_bytes(b'{"event": "join_game", "game_id": 6}')
            ws.send_bytes(b'{"event": "get_live_status"}')

            status = ws.receive_json()
            assert status["event"] == "live_status"
            assert status["data"]["rooms"] == ["game_6", "live"]

    def test_greeting_precedes_broadcasts(self, client):
        hub = client.app.state.hub
        original_connect = hub.connect

        async def connect_then_publish(websocket):
            await original_connect(websocket)
            await hub.publish("score_event", {"kind": "score_event", "game_id": 1}, 1)

        hub.connect = connect_then_publish

        with client.websocket_connect("/ws/live") as ws:
            first = ws.receive_json()
            second = ws.receive_json()

        assert first["event"] == "connected"
        assert second["event"] == "score_event"
        assert second["room"] == "live"

    def test_score_event_reaches_game_and_live_rooms(self, client, fake_db):
        fake_db.conn.script[:] = scoring_script()

        with client.websocket_connect("/ws/live") as ws:
            ws.receive_json()
            ws.send_json({"event": "join_game", "game_id": 1})
            ws.send_json({"event": "get_live_status"})
            ws.receive_json()

            r = client.post("/api/events", json=VALID_EVENT)
            assert r.status_code == 201

            first = ws.receive_json()
            second = ws.receive_json()

        assert [first["room"], second["room"]] == ["game_1", "live"]
        for message in (first, second):
            assert message["event"] == "score_event"
            assert message["data"]["kind"] == "score_event"
            assert message["data"]["event_id"] == 99
            assert message["data"]["points"] == 6

    def test_connection_counted(self, client):
        with client.websocket_connect("/ws/live") as ws:
            ws.receive_json()
            ws.send_json({"event": "join_game", "game_id": 2})
            ws.send_json({"event": "get_live_status"})
            ws.receive_json()

            stats = client.get("/health/live").json()["data"]
            assert stats == {"rooms": {"live": 1, "game_2": 1}, "connections": 1}
