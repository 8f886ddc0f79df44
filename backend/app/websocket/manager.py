"""WebSocket connection manager for private notifications and broadcasts."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fastapi import WebSocket
from pydantic import BaseModel

from app.schemas.notification import NotificationOut
from app.websocket.schemas import EventMessage, NotificationMessage

logger = logging.getLogger(__name__)


@dataclass
class ClientConnection:
    """Tracks who is on the other end of a socket."""

    websocket: WebSocket
    user_id: int | None = None
    role: str | None = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ConnectionManager:
    """
    Manages WebSocket connections.

    Two delivery modes:
    - private: only the sockets identified as a given user
    - broadcast: every connected socket, identified or not

    Identity is not authenticated here. The user id must come from the same
    upstream gateway that sets `X-User-Id` on HTTP requests, ideally as that
    header on the WebSocket handshake; a socket pinned that way cannot
    re-identify as another user.

    Delivery is at-most-once. Messages to offline users are not queued;
    clients fetch persisted notifications on reconnect. Designed for
    single-instance deployment; can be extended with Redis pub/sub for
    multi-instance horizontal scaling.
    """

    def __init__(self):
        self._connections: dict[WebSocket, ClientConnection] = {}
        self._lock = asyncio.Lock()
        # Strong references to pending cleanup tasks
        self._tasks: set[asyncio.Task] = set()

    @property
    def connection_count(self) -> int:
        """Number of active connections."""
        return len(self._connections)

    def connections_for_user(self, user_id: int) -> int:
        return sum(1 for conn in self._connections.values() if conn.user_id == user_id)

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self._connections[websocket] = ClientConnection(websocket=websocket)
        logger.info(f"WebSocket connected. Total connections: {self.connection_count}")

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a disconnected WebSocket."""
        async with self._lock:
            if websocket in self._connections:
                del self._connections[websocket]
        logger.info(f"WebSocket disconnected. Total connections: {self.connection_count}")

    async def identify(self, websocket: WebSocket, user_id: int, role: str | None = None) -> None:
        """Join a connection to the private channel of ``user_id``."""
        async with self._lock:
            if websocket in self._connections:
                conn = self._connections[websocket]
                conn.user_id = user_id
                conn.role = role
                logger.debug(f"Connection identified as user {user_id} ({role})")

    async def send_to_user(self, user_id: int, notification: NotificationOut) -> int:
        """
        Push a notification to every active connection of one user.

        Returns the number of sockets the message was sent to.
        """
        message = NotificationMessage(data=notification, timestamp=datetime.now(UTC))

        async with self._lock:
            targets = [
                websocket
                for websocket, conn in self._connections.items()
                if conn.user_id == user_id
            ]
            if targets:
                await asyncio.gather(
                    *(self._send_safe(ws, message) for ws in targets),
                    return_exceptions=True,
                )

        if targets:
            logger.info(f"Delivered notification {notification.id} to user {user_id} ({len(targets)} sockets)")
        return len(targets)

    async def broadcast(self, event: str, payload: dict[str, Any]) -> int:
        """Send an event to all connected clients regardless of identity."""
        async with self._lock:
            if not self._connections:
                return 0

            message = EventMessage(event=event, data=payload, timestamp=datetime.now(UTC))
            targets = list(self._connections)
            await asyncio.gather(
                *(self._send_safe(ws, message) for ws in targets),
                return_exceptions=True,
            )

        logger.info(f"Broadcast {event!r} to {len(targets)} clients")
        return len(targets)

    async def _send_safe(self, websocket: WebSocket, message: BaseModel) -> None:
        """Send message to websocket, handling errors gracefully."""
        try:
            await websocket.send_json(message.model_dump(mode="json"))
        except Exception as e:
            logger.warning(f"Failed to send to websocket: {e}")
            # Schedule disconnect (don't do it here to avoid deadlock)
            task = asyncio.create_task(self.disconnect(websocket))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)


# Global singleton instance
manager = ConnectionManager()
