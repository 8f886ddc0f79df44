"""Pydantic schemas for API request/response validation."""

from app.schemas.analysis import AnalysisRequest, AnalysisResult
from app.schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate, ServiceAreaIn
from app.schemas.notification import NotificationOut
from app.schemas.report import (
    AssignDepartmentIn,
    CommentIn,
    EscalateIn,
    ReportCreate,
    ReportOut,
    ReportUpdateOut,
    ResolveIn,
    StatusChangeIn,
)
from app.schemas.user import LeaderboardEntry, UserProfileOut

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "AssignDepartmentIn",
    "CommentIn",
    "DepartmentCreate",
    "DepartmentOut",
    "DepartmentUpdate",
    "EscalateIn",
    "LeaderboardEntry",
    "NotificationOut",
    "ReportCreate",
    "ReportOut",
    "ReportUpdateOut",
    "ResolveIn",
    "ServiceAreaIn",
    "StatusChangeIn",
    "UserProfileOut",
]
