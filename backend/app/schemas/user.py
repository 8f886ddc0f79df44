"""Pydantic schemas for user profiles and the leaderboard."""

from pydantic import BaseModel, ConfigDict


class Badge(BaseModel):
    id: str
    name: str
    icon: str


class UserProfileOut(BaseModel):
    id: int
    name: str
    role: str
    department_id: int | None = None
    points: int
    rank: str
    points_to_next_rank: int
    badges: list[Badge]


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    points: int
    badges: list[str]
