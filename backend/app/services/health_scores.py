"""Civic health score aggregation run by the scheduler."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import CivicHealthScore, Report, ReportStatus

logger = logging.getLogger(__name__)


def score(unresolved: int, total: int) -> float:
    """100 when everything is resolved, 0 when nothing is."""
    if total <= 0:
        return 100.0
    return 100.0 - (unresolved / total) * 100.0


async def calculate_health_scores(
    db: AsyncSession, window_days: int = 30, now: datetime | None = None
) -> list[CivicHealthScore]:
    """
    Compute and persist one score per category over the trailing window.

    Only categories with at least one report in the window get a row.
    """
    now = now or datetime.now(UTC)
    since = now - timedelta(days=window_days)

    unresolved = func.sum(case((Report.status != ReportStatus.RESOLVED, 1), else_=0))
    result = await db.execute(
        select(Report.category, unresolved, func.count(Report.id))
        .where(Report.created_at >= since, Report.category.is_not(None))
        .group_by(Report.category)
        .order_by(Report.category)
    )

    scores = [
        CivicHealthScore(
            category=category,
            score=score(int(open_count or 0), int(total)),
            unresolved_count=int(open_count or 0),
            total_count=int(total),
            window_days=window_days,
            computed_at=now,
        )
        for category, open_count, total in result.all()
    ]
    db.add_all(scores)
    await db.commit()

    logger.info(f"Health scores calculated for {len(scores)} categories")
    return scores


async def latest_health_scores(db: AsyncSession) -> list[CivicHealthScore]:
    """Most recent score per category."""
    latest = (
        select(CivicHealthScore.category, func.max(CivicHealthScore.id).label("max_id"))
        .group_by(CivicHealthScore.category)
        .subquery()
    )
    result = await db.execute(
        select(CivicHealthScore)
        .join(latest, CivicHealthScore.id == latest.c.max_id)
        .order_by(CivicHealthScore.category)
    )
    return list(result.scalars().all())
