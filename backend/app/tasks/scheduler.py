"""Background task scheduler for periodic aggregation jobs."""

import logging
from datetime import UTC, datetime, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config import get_settings
from app.database import async_session_maker
from app.services.health_scores import calculate_health_scores

logger = logging.getLogger(__name__)
settings = get_settings()

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None


async def health_score_job() -> None:
    """Background job computing civic health scores per category."""
    logger.info("Starting scheduled civic health score calculation")
    try:
        async with async_session_maker() as db:
            scores = await calculate_health_scores(db, window_days=settings.health_score_window_days)
            logger.info(f"Health score job complete: {len(scores)} categories")
    except Exception as e:
        logger.error(f"Health score job failed: {e}", exc_info=True)


def setup_scheduler() -> AsyncIOScheduler:
    """Set up and start the background task scheduler."""
    global scheduler

    scheduler = AsyncIOScheduler()
    now = datetime.now(UTC)

    scheduler.add_job(
        health_score_job,
        trigger=IntervalTrigger(minutes=settings.health_score_interval_minutes),
        next_run_time=now + timedelta(seconds=30),
        id="civic_health_scores",
        name="Calculate civic health scores",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.start()
    logger.info("Scheduler started")

    return scheduler


def shutdown_scheduler() -> None:
    """Shut down the scheduler gracefully."""
    global scheduler

    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
        scheduler = None
