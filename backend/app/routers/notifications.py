"""Notification inbox routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import CurrentUser
from app.schemas.notification import NotificationOut
from app.services.notifications import list_notifications, mark_all_read

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationOut])
async def get_notifications(
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(20, ge=1, le=100),
) -> list[NotificationOut]:
    """Latest notifications, newest first. Clients call this on reconnect."""
    notifications = await list_notifications(db, user.id, limit=limit)
    return [NotificationOut.model_validate(n) for n in notifications]


@router.post("/read")
async def read_all(user: CurrentUser, db: Annotated[AsyncSession, Depends(get_db)]) -> dict:
    updated = await mark_all_read(db, user.id)
    return {"message": "Notifications marked as read", "updated": updated}
