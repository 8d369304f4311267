"""
Pytest configuration for league-live tests.

Most tests run against in-memory fakes of the database and the broadcast
channel. Tests that need a real PostgreSQL server use the `pg_url` fixture
and are skipped when DATABASE_URL is not set.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import pytest

from league_live.api.rate_limit import reset_rate_limiters
from league_live.core.config import get_settings


def pytest_configure(config):
    """Configure pytest with database URL if available."""
    # Try to load from .env file if environment variables not already set
    env_file = os.path.join(os.path.dirname(__file__), "..", ".env")
    if os.path.exists(env_file):
        with open(env_file) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip('"').strip("'")
                    if key not in os.environ:
                        os.environ[key] = value


@pytest.fixture(scope="session")
def pg_url():
    """Get the test database URL."""
    url = os.environ.get("DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not set")
    return url


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Rate limiting off and settings re-read for every test."""
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    get_settings.cache_clear()
    reset_rate_limiters()
    yield
    get_settings.cache_clear()
    reset_rate_limiters()


# =========================================================================
# Database fakes
# =========================================================================


def _normalize(query: str) -> str:
    return " ".join(query.split())


class FakeCursor:
    def __init__(self, rows: list[dict[str, Any]] | None = None, rowcount: int | None = None):
        self._rows = list(rows or [])
        self.rowcount = len(self._rows) if rowcount is None else rowcount

    async def fetchone(self):
        return self._rows[0] if self._rows else None

    async def fetchall(self):
        return list(self._rows)


class FakeConnection:
    """
    Answers statements from a script of (sql fragment, result) pairs.

    The first fragment contained in the whitespace-normalized statement
    wins. A result may be a list of row dicts, an int row count, an
    exception instance to raise, or a callable taking the params and
    returning one of those. Unscripted statements affect no rows.
    """

    def __init__(self, script: list[tuple[str, Any]]):
        self.script = script
        self.calls: list[tuple[str, Any]] = []

    async def execute(self, query: str, params: Any = ()):
        sql = _normalize(query)
        self.calls.append((sql, params))
        for fragment, result in self.script:
            if fragment in sql:
                if callable(result) and not isinstance(result, Exception):
                    result = result(params)
                if isinstance(result, Exception):
                    raise result
                if isinstance(result, int):
                    return FakeCursor(rowcount=result)
                return FakeCursor(result)
        return FakeCursor()


class FakeDB:
    """Stand-in for AsyncPostgresDB that records statements and transactions."""

    def __init__(self, script: list[tuple[str, Any]] | None = None):
        self.conn = FakeConnection(script or [])
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def transaction(self):
        try:
            yield self.conn
        except Exception:
            self.rollbacks += 1
            raise
        else:
            self.commits += 1

    async def execute(self, query: str, params: Any = ()) -> int:
        cur = await self.conn.execute(query, params)
        return cur.rowcount

    async def fetchone(self, query: str, params: Any = ()):
        cur = await self.conn.execute(query, params)
        return await cur.fetchone()

    async def fetchall(self, query: str, params: Any = ()):
        cur = await self.conn.execute(query, params)
        return await cur.fetchall()

    async def ping(self) -> bool:
        return True

    @property
    def calls(self) -> list[tuple[str, Any]]:
        return self.conn.calls

    def statements_matching(self, fragment: str) -> list[tuple[str, Any]]:
        return [(sql, params) for sql, params in self.conn.calls if fragment in sql]


class RecordingChannel:
    """Broadcast channel that keeps every publish."""

    def __init__(self):
        self.published: list[tuple[str, dict[str, Any], int | None]] = []

    async def publish(self, event: str, payload: dict[str, Any], game_id: int | None = None) -> None:
        self.published.append((event, payload, game_id))


class FailingChannel:
    async def publish(self, event: str, payload: dict[str, Any], game_id: int | None = None) -> None:
        raise ConnectionError("subscriber transport down")


EVENT_CREATED_AT = datetime(2025, 3, 1, 18, 30, tzinfo=timezone.utc)


def football_game_row(**overrides) -> dict[str, Any]:
    """Game 1: team 10 (Hawks) vs team 20 (Sharks), football."""
    row = {
        "id": 1,
        "sport": "FOOTBALL",
        "status": "LIVE",
        "scheduled_time": datetime(2025, 3, 1, 18, 0, tzinfo=timezone.utc),
        "team1_id": 10,
        "team2_id": 20,
        "team1_score": 0,
        "team2_score": 0,
        "created_at": datetime(2025, 2, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2025, 3, 1, 18, 0, tzinfo=timezone.utc),
        "team1_name": "Hawks",
        "team2_name": "Sharks",
    }
    row.update(overrides)
    return row


def scoring_script(game: dict[str, Any] | None = None, event_id: int = 99) -> list[tuple[str, Any]]:
    """Script for a successful score event against game 1."""
    game = game or football_game_row()
    return [
        (
            "SELECT id, sport, team1_id, team2_id FROM games",
            [{k: game[k] for k in ("id", "sport", "team1_id", "team2_id")}],
        ),
        ("INSERT INTO score_events", [{"id": event_id, "created_at": EVENT_CREATED_AT}]),
        ("UPDATE games SET", 1),
        ("UPDATE player_stats", 1),
    ]


@pytest.fixture
def channel():
    return RecordingChannel()
