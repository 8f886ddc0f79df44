"""Shared FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import async_session_maker, get_db
from app.models import User, UserRole
from app.services.notifications import NotificationDispatcher
from app.services.reports import ReportService
from app.websocket.manager import manager as ws_manager


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for work that must stay outside the request transaction."""
    return async_session_maker


def get_notifier(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> NotificationDispatcher:
    return NotificationDispatcher(session_factory=session_factory, connections=ws_manager)


def get_report_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    notifier: Annotated[NotificationDispatcher, Depends(get_notifier)],
) -> ReportService:
    return ReportService(db, notifier=notifier)


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    x_user_id: Annotated[int | None, Header()] = None,
) -> User:
    """
    Resolve the acting user.

    Authentication happens upstream; the gateway forwards the verified
    user id in the ``X-User-Id`` header.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    user = await db.get(User, x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def require_roles(*roles: UserRole):
    """Dependency factory restricting an endpoint to the given roles."""

    async def checker(user: Annotated[User, Depends(get_current_user)]) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Not allowed for this role")
        return user

    return checker


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]
StaffUser = Annotated[User, Depends(require_roles(UserRole.STAFF, UserRole.ADMIN))]
Reports = Annotated[ReportService, Depends(get_report_service)]
