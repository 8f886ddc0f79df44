"""WebSocket router for real-time notifications and dashboard events."""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.websocket.manager import manager
from app.websocket.schemas import ErrorMessage, IdentifyMessage, PingMessage, PongMessage

logger = logging.getLogger(__name__)

router = APIRouter()


def _handshake_user_id(websocket: WebSocket) -> int | None:
    """User id forwarded by the gateway on the handshake, if any."""
    raw = websocket.headers.get("x-user-id")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed X-User-Id on WebSocket handshake: {raw!r}")
        return None


@router.websocket("/ws/events")
async def websocket_events(websocket: WebSocket):
    """
    WebSocket endpoint for notifications and live dashboard updates.

    Protocol:
    - Client connects and immediately receives broadcast events
    - A handshake `X-User-Id` header (set by the gateway) identifies the
      connection and pins it to that user
    - Otherwise the client sends an identify message to receive its
      private notifications
    - Server sends pong in response to ping for keep-alive

    Message formats:
    Client -> Server:
        {"type": "identify", "user_id": 42, "role": "admin"}
        {"type": "ping"}

    Server -> Client:
        {"type": "notification", "data": {...}, "timestamp": "2026-01-18T10:30:00Z"}
        {"type": "event", "event": "new_report", "data": {...}, "timestamp": "..."}
        {"type": "pong"}
        {"type": "error", "message": "..."}
    """
    await manager.connect(websocket)

    pinned_user_id = _handshake_user_id(websocket)
    if pinned_user_id is not None:
        await manager.identify(websocket, user_id=pinned_user_id)

    try:
        while True:
            raw_message = await websocket.receive_text()

            try:
                data = json.loads(raw_message)
                msg_type = data.get("type")

                if msg_type == "identify":
                    msg = IdentifyMessage.model_validate(data)
                    if pinned_user_id is not None and msg.user_id != pinned_user_id:
                        error = ErrorMessage(message="Connection is bound to another user")
                        await websocket.send_json(error.model_dump())
                        continue
                    await manager.identify(websocket, user_id=msg.user_id, role=msg.role)

                elif msg_type == "ping":
                    PingMessage.model_validate(data)
                    await websocket.send_json(PongMessage().model_dump())

                else:
                    error = ErrorMessage(message=f"Unknown message type: {msg_type}")
                    await websocket.send_json(error.model_dump())

            except json.JSONDecodeError:
                error = ErrorMessage(message="Invalid JSON")
                await websocket.send_json(error.model_dump())
            except Exception as e:
                logger.exception(f"Error processing message: {e}")
                error = ErrorMessage(message=str(e))
                await websocket.send_json(error.model_dump())

    except WebSocketDisconnect:
        await manager.disconnect(websocket)
    except Exception as e:
        logger.exception(f"WebSocket error: {e}")
        await manager.disconnect(websocket)
