"""Notification dispatcher: persisted personal notifications plus real-time push."""

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import async_session_maker
from app.models import Notification, User, UserRole
from app.schemas.notification import NotificationOut
from app.websocket.manager import ConnectionManager
from app.websocket.manager import manager as ws_manager

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Fire-and-forget notifications.

    Each notification is written in its own session so a failed insert can
    never roll back or expire the business transaction that triggered it.
    Persistence and delivery errors are logged and swallowed.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = async_session_maker,
        connections: ConnectionManager = ws_manager,
    ):
        self.session_factory = session_factory
        self.connections = connections

    async def notify(
        self,
        recipient_id: int,
        title: str,
        body: str,
        report_id: int | None = None,
    ) -> NotificationOut | None:
        """Persist a notification and push it to the recipient's private channel."""
        try:
            async with self.session_factory() as db:
                notification = Notification(
                    recipient_id=recipient_id,
                    title=title,
                    body=body,
                    report_id=report_id,
                    is_read=False,
                )
                db.add(notification)
                await db.commit()
                out = NotificationOut.model_validate(notification)
        except Exception as e:
            logger.error(f"Error creating notification for user {recipient_id}: {e}", exc_info=True)
            return None

        try:
            await self.connections.send_to_user(recipient_id, out)
        except Exception as e:
            logger.warning(f"Real-time delivery to user {recipient_id} failed: {e}")

        return out

    async def notify_admins(self, title: str, body: str, report_id: int | None = None) -> int:
        """Best-effort notify of every administrator. Returns how many were stored."""
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(User.id).where(User.role == UserRole.ADMIN).order_by(User.id)
                )
                admin_ids = list(result.scalars().all())
        except Exception as e:
            logger.error(f"Could not load administrators for notification: {e}", exc_info=True)
            return 0

        sent = 0
        for admin_id in admin_ids:
            if await self.notify(admin_id, title, body, report_id) is not None:
                sent += 1
        return sent

    async def broadcast(self, event: str, payload: dict[str, Any]) -> None:
        """Push a system-wide event to every connected client."""
        try:
            await self.connections.broadcast(event, payload)
        except Exception as e:
            logger.warning(f"Broadcast of {event!r} failed: {e}")


async def list_notifications(db: AsyncSession, user_id: int, limit: int = 20) -> list[Notification]:
    """Latest notifications for a user, newest first."""
    result = await db.execute(
        select(Notification)
        .where(Notification.recipient_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def mark_all_read(db: AsyncSession, user_id: int) -> int:
    """Mark every unread notification of a user as read."""
    result = await db.execute(
        update(Notification)
        .where(Notification.recipient_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    await db.commit()
    return result.rowcount or 0
