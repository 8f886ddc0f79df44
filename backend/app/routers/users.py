"""User profile and leaderboard routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import CurrentUser
from app.schemas.user import Badge, LeaderboardEntry, UserProfileOut
from app.services.gamification import badge_details, calculate_rank, leaderboard

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserProfileOut)
async def my_profile(user: CurrentUser) -> UserProfileOut:
    rank, to_next = calculate_rank(user.points)
    return UserProfileOut(
        id=user.id,
        name=user.name,
        role=user.role,
        department_id=user.department_id,
        points=user.points,
        rank=rank,
        points_to_next_rank=to_next,
        badges=[Badge(**b) for b in badge_details(user.badges)],
    )


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def get_leaderboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(10, ge=1, le=100),
) -> list[LeaderboardEntry]:
    users = await leaderboard(db, limit=limit)
    return [LeaderboardEntry.model_validate(u) for u in users]
