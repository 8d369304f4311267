"""
WebSocket endpoint for live game updates.

Connection lifecycle:
    1. Client connects to /ws/live and is placed in the "live" room
    2. Server sends {"event": "connected", "data": {...}}
    3. Client manages per-game rooms with
         {"event": "join_game", "game_id": 7}
         {"event": "leave_game", "game_id": 7}
       and may ask {"event": "get_live_status"}
    4. Server pushes "score_event" and "game_update" messages, each as
         {"event": ..., "room": ..., "data": {"kind": ..., ...}}
    5. Room memberships are dropped on disconnect
"""

import logging
from datetime import datetime, timezone
from typing import Any

import msgspec
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ...broadcast import LiveHub
from ...core.types import game_room

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": "error", "data": {"message": message}})


async def _handle_message(hub: LiveHub, websocket: WebSocket, message: Any) -> None:
    if not isinstance(message, dict) or not isinstance(message.get("event"), str):
        await _send_error(websocket, "Messages must be objects with an 'event' field")
        return

    event = message["event"]

    if event in ("join_game", "leave_game"):
        game_id = message.get("game_id")
        if not isinstance(game_id, int) or isinstance(game_id, bool) or game_id <= 0:
            await _send_error(websocket, f"{event} requires a positive integer game_id")
            return
        if event == "join_game":
            await hub.join(websocket, game_room(game_id))
            logger.info("Client joined game %s", game_id)
        else:
            await hub.leave(websocket, game_room(game_id))
            logger.info("Client left game %s", game_id)
        return

    if event == "get_live_status":
        await websocket.send_json(
            {
                "event": "live_status",
                "data": {
                    "message": "Live status requested",
                    "rooms": sorted(hub.rooms_of(websocket)),
                    "timestamp": _now(),
                },
            }
        )
        return

    await _send_error(websocket, f"Unknown event: {event}")


@router.websocket("/ws/live")
async def live_feed(websocket: WebSocket) -> None:
    """Stream score events and game updates to the client."""
    hub: LiveHub = websocket.app.state.hub

    await websocket.accept()

    try:
        # The greeting is always the first frame a client receives
        await websocket.send_json(
            {
                "event": "connected",
                "data": {"message": "Connected to live feed", "timestamp": _now()},
            }
        )
        await hub.connect(websocket)
        logger.info("Live client connected (%d connected)", hub.get_stats()["connections"])

        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000), frame.get("reason"))

            raw = frame.get("text") or frame.get("bytes")
            if not raw:
                await _send_error(websocket, "Empty message")
                continue
            try:
                message = msgspec.json.decode(raw)
            except msgspec.DecodeError:
                await _send_error(websocket, "Invalid JSON")
                continue
            await _handle_message(hub, websocket, message)

    except WebSocketDisconnect as e:
        logger.info("Live client disconnected (code %s)", e.code)
    finally:
        await hub.disconnect(websocket)
