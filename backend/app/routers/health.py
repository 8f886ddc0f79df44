"""Health and metrics endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import Department, Report
from app.services.health_scores import latest_health_scores
from app.websocket.manager import manager as ws_manager

router = APIRouter(tags=["health"])


class CategoryHealth(BaseModel):
    """Latest civic health score for a category."""

    category: str
    score: float
    unresolved_count: int
    total_count: int
    computed_at: datetime


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    reports_by_status: dict[str, int]
    unassigned_reports: int
    departments: int
    websocket_connections: int
    civic_health: list[CategoryHealth]


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthResponse:
    """
    Health check endpoint with routing status.

    Unassigned reports are the ones routing could not place and that
    need operator follow-up.
    """
    status_result = await db.execute(
        select(Report.status, func.count(Report.id)).group_by(Report.status)
    )
    reports_by_status = {status: count for status, count in status_result.all()}

    unassigned = await db.scalar(
        select(func.count(Report.id)).where(Report.assigned_department_id.is_(None))
    )
    departments = await db.scalar(select(func.count(Department.id)))

    scores = await latest_health_scores(db)

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        reports_by_status=reports_by_status,
        unassigned_reports=unassigned or 0,
        departments=departments or 0,
        websocket_connections=ws_manager.connection_count,
        civic_health=[
            CategoryHealth(
                category=s.category,
                score=s.score,
                unresolved_count=s.unresolved_count,
                total_count=s.total_count,
                computed_at=s.computed_at,
            )
            for s in scores
        ],
    )


@router.get("/ready")
async def readiness_check() -> dict:
    """Simple readiness probe for container orchestration."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Simple liveness probe for container orchestration."""
    return {"status": "alive"}
