"""
Live broadcast channel over WebSockets.

Clients connect to the hub and are placed in the global "live" room; they
may then join or leave per-game rooms ("game_<id>"). Every publish that
names a game is delivered to that game's room and to "live", one message
per room. Delivery is at-most-once: a socket that fails a send is dropped.

Services receive a BroadcastChannel and hand it to publish_detached() after
their transaction commits, so the HTTP response never waits on delivery.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Optional, Protocol

from fastapi import WebSocket, WebSocketDisconnect

from .core.types import LIVE_ROOM, game_room

logger = logging.getLogger(__name__)


class BroadcastChannel(Protocol):
    """Topic-addressed publish/subscribe channel."""

    async def publish(self, event: str, payload: dict[str, Any], game_id: Optional[int] = None) -> None:
        ...


class LiveHub:
    """Tracks WebSocket clients by room and fans messages out to them."""

    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        """Register an accepted socket in the live room."""
        await self.join(websocket, LIVE_ROOM)

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a socket from every room it joined."""
        async with self._lock:
            for room in list(self._rooms):
                self._rooms[room].discard(websocket)
                if not self._rooms[room]:
                    del self._rooms[room]

    async def join(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            self._rooms[room].add(websocket)
        logger.debug("Socket joined %s (%d members)", room, self.room_size(room))

    async def leave(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            members = self._rooms.get(room)
            if members is None:
                return
            members.discard(websocket)
            if not members:
                del self._rooms[room]

    async def emit(self, room: str, event: str, payload: dict[str, Any]) -> int:
        """
        Send one message to every member of a room.

        Returns:
            Number of sockets the message was written to
        """
        async with self._lock:
            members = list(self._rooms.get(room, ()))

        if not members:
            return 0

        message = {"event": event, "room": room, "data": payload}
        dead: list[WebSocket] = []
        delivered = 0

        for websocket in members:
            try:
                await websocket.send_json(message)
                delivered += 1
            except WebSocketDisconnect:
                dead.append(websocket)
            except Exception as e:
                logger.warning("Dropping socket after failed send to %s: %s", room, e)
                dead.append(websocket)

        for websocket in dead:
            await self.disconnect(websocket)

        return delivered

    async def publish(self, event: str, payload: dict[str, Any], game_id: Optional[int] = None) -> None:
        """Deliver to the game's room (when given) and to the live room."""
        if game_id is not None:
            await self.emit(game_room(game_id), event, payload)
        await self.emit(LIVE_ROOM, event, payload)

    def room_size(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    def rooms_of(self, websocket: WebSocket) -> set[str]:
        return {room for room, members in self._rooms.items() if websocket in members}

    def get_stats(self) -> dict[str, Any]:
        """Connection counts per room."""
        return {
            "rooms": {room: len(members) for room, members in self._rooms.items()},
            "connections": self.room_size(LIVE_ROOM),
        }


# Detached publishes still running; holding them keeps the tasks alive
_pending: set[asyncio.Task] = set()


async def _publish_quietly(
    channel: BroadcastChannel,
    event: str,
    payload: dict[str, Any],
    game_id: Optional[int],
) -> None:
    try:
        await channel.publish(event, payload, game_id)
    except Exception as e:
        logger.warning("Broadcast of %s for game %s failed: %s", event, game_id, e)


def publish_detached(
    channel: Optional[BroadcastChannel],
    event: str,
    payload: dict[str, Any],
    game_id: Optional[int] = None,
) -> Optional[asyncio.Task]:
    """
    Schedule a publish without waiting for it.

    Errors are logged and discarded. Must be called from a running event loop.
    """
    if channel is None:
        return None
    task = asyncio.create_task(_publish_quietly(channel, event, payload, game_id))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


async def drain_pending() -> None:
    """Wait for every detached publish scheduled so far."""
    while _pending:
        await asyncio.gather(*list(_pending), return_exceptions=True)
