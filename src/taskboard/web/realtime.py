# src/taskboard/web/realtime.py

"""
Real-time channel over a WebSocket.

Frames are JSON objects {"event": <name>, "data": <payload>} in both directions.
The only client event is "authenticate", carrying the bearer token either as a
bare string or as {"token": "..."}. Server events come from NotificationFanout.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..core.state import AppState

logger = logging.getLogger(__name__)

router = APIRouter()


class WebSocketSink:
    """EventSink backed by one accepted WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def send_event(self, event: str, data: Any = None) -> None:
        await self._websocket.send_json({"event": event, "data": data})


def _token_from(data: Any) -> str | None:
    if isinstance(data, dict):
        data = data.get("token")
    if not isinstance(data, str):
        return None
    token = data.strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    return token or None


@router.websocket("/ws")
async def realtime_events(websocket: WebSocket) -> None:
    state: AppState = websocket.app.state.taskboard
    fanout = state.fanout

    await websocket.accept()
    connection_id = fanout.attach(WebSocketSink(websocket))

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                logger.debug("Ignoring binary frame conn=%s", connection_id)
                continue
            try:
                message = json.loads(raw)
            except ValueError:
                logger.debug("Ignoring non-JSON frame conn=%s", connection_id)
                continue

            if not isinstance(message, dict):
                continue

            event = message.get("event")
            if event == "authenticate":
                fanout.authenticate(connection_id, _token_from(message.get("data")))
            else:
                logger.debug("Ignoring unknown event %r conn=%s", event, connection_id)
    except WebSocketDisconnect:
        logger.debug("Socket disconnected conn=%s", connection_id)
    finally:
        fanout.detach(connection_id)
