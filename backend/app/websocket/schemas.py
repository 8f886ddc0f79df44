"""WebSocket message schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel

from app.schemas.notification import NotificationOut


class IdentifyMessage(BaseModel):
    """Client message joining the connection to a user's private channel."""

    type: Literal["identify"] = "identify"
    user_id: int
    role: str | None = None


class NotificationMessage(BaseModel):
    """Server message carrying a personal notification."""

    type: Literal["notification"] = "notification"
    data: NotificationOut
    timestamp: datetime


class EventMessage(BaseModel):
    """Server message for system-wide events (e.g. ``new_report``)."""

    type: Literal["event"] = "event"
    event: str
    data: dict[str, Any]
    timestamp: datetime


class PingMessage(BaseModel):
    """Ping message for keep-alive."""

    type: Literal["ping"] = "ping"


class PongMessage(BaseModel):
    """Pong response for keep-alive."""

    type: Literal["pong"] = "pong"


class ErrorMessage(BaseModel):
    """Error message from server."""

    type: Literal["error"] = "error"
    message: str
