"""
Tests for the live hub and detached publishing.
"""

from __future__ import annotations

import pytest
from fastapi import WebSocketDisconnect

from conftest import FailingChannel, RecordingChannel
from league_live.broadcast import LiveHub, drain_pending, publish_detached
from league_live.core.types import LIVE_ROOM, game_room


class FakeWebSocket:
    def __init__(self, fail_with: Exception | None = None):
        self.sent: list[dict] = []
        self.fail_with = fail_with

    async def send_json(self, data):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(data)


@pytest.fixture
def hub():
    return LiveHub()


class TestRooms:
    async def test_connect_joins_live(self, hub):
        ws = FakeWebSocket()
        await hub.connect(ws)

        assert hub.rooms_of(ws) == {LIVE_ROOM}
        assert hub.get_stats() == {"rooms": {LIVE_ROOM: 1}, "connections": 1}

    async def test_join_and_leave_game(self, hub):
        ws = FakeWebSocket()
        await hub.connect(ws)
        await hub.join(ws, game_room(3))
        assert hub.room_size("game_3") == 1

        await hub.leave(ws, game_room(3))
        assert hub.room_size("game_3") == 0
        assert hub.rooms_of(ws) == {LIVE_ROOM}

    async def test_leave_unknown_room(self, hub):
        ws = FakeWebSocket()
        await hub.leave(ws, game_room(8))
        assert hub.get_stats()["rooms"] == {}

    async def test_disconnect_clears_every_room(self, hub):
        ws = FakeWebSocket()
        await hub.connect(ws)
        await hub.join(ws, game_room(1))
        await hub.join(ws, game_room(2))

        await hub.disconnect(ws)

        assert hub.rooms_of(ws) == set()
        assert hub.get_stats() == {"rooms": {}, "connections": 0}


class TestPublish:
    async def test_one_message_per_room(self, hub):
        watcher = FakeWebSocket()
        lobby = FakeWebSocket()
        await hub.connect(watcher)
        await hub.connect(lobby)
        await hub.join(watcher, game_room(1))

        await hub.publish("score_event", {"kind": "score_event", "points": 6}, game_id=1)

        assert [m["room"] for m in watcher.sent] == ["game_1", "live"]
        assert [m["room"] for m in lobby.sent] == ["live"]
        assert lobby.sent[0] == {
            "event": "score_event",
            "room": "live",
            "data": {"kind": "score_event", "points": 6},
        }

    async def test_other_game_room_not_notified(self, hub):
        ws = FakeWebSocket()
        await hub.join(ws, game_room(2))

        await hub.publish("score_event", {"kind": "score_event"}, game_id=1)

        assert ws.sent == []

    async def test_publish_without_game_goes_to_live(self, hub):
        ws = FakeWebSocket()
        await hub.connect(ws)

        await hub.publish("game_update", {"kind": "status_update"})

        assert len(ws.sent) == 1

    async def test_failed_sockets_dropped(self, hub):
        good = FakeWebSocket()
        gone = FakeWebSocket(fail_with=WebSocketDisconnect())
        broken = FakeWebSocket(fail_with=RuntimeError("closed"))
        for ws in (good, gone, broken):
            await hub.connect(ws)

        delivered = await hub.emit(LIVE_ROOM, "score_event", {})

        assert delivered == 1
        assert hub.room_size(LIVE_ROOM) == 1
        assert hub.rooms_of(gone) == set()

    async def test_emit_to_empty_room(self, hub):
        assert await hub.emit("game_99", "score_event", {}) == 0


class TestDetachedPublish:
    async def test_runs_after_drain(self):
        channel = RecordingChannel()

        task = publish_detached(channel, "score_event", {"kind": "score_event"}, 4)
        await drain_pending()

        assert task is not None and task.done()
        assert channel.published == [("score_event", {"kind": "score_event"}, 4)]

    async def test_errors_are_swallowed(self):
        task = publish_detached(FailingChannel(), "score_event", {}, 4)
        await drain_pending()

        assert task.exception() is None

    def test_no_channel_is_noop(self):
        assert publish_detached(None, "score_event", {}) is None
