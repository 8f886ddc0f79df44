"""Database models."""

from app.models.department import Department, ServiceArea
from app.models.health_score import CivicHealthScore
from app.models.notification import Notification
from app.models.report import (
    ProcessingMethod,
    Report,
    ReportCategory,
    ReportStatus,
    report_upvotes,
)
from app.models.update import ChangeType, ReportUpdate
from app.models.user import User, UserRole

__all__ = [
    "ChangeType",
    "CivicHealthScore",
    "Department",
    "Notification",
    "ProcessingMethod",
    "Report",
    "ReportCategory",
    "ReportStatus",
    "ReportUpdate",
    "ServiceArea",
    "User",
    "UserRole",
    "report_upvotes",
]
