"""Points, badges and ranks for citizen engagement."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.models import ProcessingMethod, Report, User, UserRole

logger = logging.getLogger(__name__)
settings = get_settings()

BADGES: dict[str, dict[str, str]] = {
    "first_report": {"name": "First Report", "icon": "📝"},
    "problem_solver_1": {"name": "Problem Solver I", "icon": "✅"},
    "problem_solver_5": {"name": "Problem Solver V", "icon": "⭐⭐"},
    "community_voice_10": {"name": "Community Voice", "icon": "🗣️"},
    "ai_early_adopter": {"name": "AI Early Adopter", "icon": "🤖"},
    "ai_power_user": {"name": "AI Power User", "icon": "⚡"},
}

# (minimum points, rank name), highest first
RANKS: tuple[tuple[int, str], ...] = (
    (200, "Civic Champion"),
    (100, "Senior Reporter"),
    (25, "Community Reporter"),
    (0, "New Reporter"),
)

COMMUNITY_VOICE_UPVOTES = 10


def calculate_rank(points: int) -> tuple[str, int]:
    """Return (rank name, points needed for the next rank)."""
    for index, (threshold, name) in enumerate(RANKS):
        if points >= threshold:
            if index == 0:
                return name, 0
            return name, RANKS[index - 1][0] - points
    return RANKS[-1][1], RANKS[-2][0] - points


def badge_details(badge_ids: list[str]) -> list[dict[str, str]]:
    """Expand badge ids into display objects, skipping unknown ids."""
    return [{"id": badge_id, **BADGES[badge_id]} for badge_id in badge_ids if badge_id in BADGES]


def add_badge(user: User, badge_id: str) -> bool:
    if badge_id in (user.badges or []):
        return False
    # Reassign so the JSON column is flagged as changed
    user.badges = [*(user.badges or []), badge_id]
    logger.info(f"User {user.id} earned badge {badge_id}")
    return True


async def award_report_points(db: AsyncSession, user: User, method: str) -> int:
    """Points and badges for submitting a report. Does not commit."""
    points = (
        settings.points_assisted_report
        if method == ProcessingMethod.ASSISTED
        else settings.points_manual_report
    )
    user.points = (user.points or 0) + points

    total = await db.scalar(select(func.count(Report.id)).where(Report.reporter_id == user.id))
    if total == 1:
        add_badge(user, "first_report")

    if method == ProcessingMethod.ASSISTED:
        assisted = await db.scalar(
            select(func.count(Report.id)).where(
                Report.reporter_id == user.id,
                Report.processing_method == ProcessingMethod.ASSISTED,
            )
        )
        if assisted == 1:
            add_badge(user, "ai_early_adopter")
        elif assisted == 10:
            add_badge(user, "ai_power_user")

    return points


def award_resolution_points(reporter: User) -> int:
    """Reward the reporter of a resolved report."""
    reporter.points = (reporter.points or 0) + settings.points_resolved_report
    return settings.points_resolved_report


async def award_staff_milestones(db: AsyncSession, staff: User) -> None:
    """Problem-solver badges for staff after 1 and 5 resolutions."""
    resolved = await db.scalar(
        select(func.count(Report.id)).where(Report.resolved_by_id == staff.id)
    )
    if resolved and resolved >= 1:
        add_badge(staff, "problem_solver_1")
    if resolved and resolved >= 5:
        add_badge(staff, "problem_solver_5")


def check_community_voice(reporter: User, upvote_count: int) -> None:
    if upvote_count == COMMUNITY_VOICE_UPVOTES:
        add_badge(reporter, "community_voice_10")


async def leaderboard(db: AsyncSession, limit: int = 10) -> list[User]:
    """Top citizens by points."""
    result = await db.execute(
        select(User)
        .where(User.role == UserRole.CITIZEN)
        .order_by(User.points.desc(), User.id)
        .limit(limit)
    )
    return list(result.scalars().all())
