"""Pydantic schemas for reports and their audit trail."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.report import ProcessingMethod, ReportCategory, ReportStatus


class ReportCreate(BaseModel):
    """Citizen submission. Coordinates are [lng, lat]."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    category: ReportCategory | None = None
    coordinates: list[float]
    media_urls: list[str] = Field(default_factory=list)

    # Filled when the client used the AI analysis service to pre-fill fields
    processing_method: ProcessingMethod = ProcessingMethod.MANUAL
    confidence: float | None = Field(None, ge=0, le=1)
    severity: str | None = None
    suggested_priority: str | None = None


class ReportOut(BaseModel):
    """Report response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    reporter_id: int | None = None
    title: str
    description: str | None = None
    category: str | None = None

    longitude: float
    latitude: float

    status: str
    priority: str
    urgency: str

    assigned_department_id: int | None = None
    assigned_staff_id: int | None = None

    media_urls: list[str] = Field(default_factory=list)
    resolved_media_urls: list[str] = Field(default_factory=list)
    resolved_by_id: int | None = None

    upvote_count: int = 0
    processing_method: str
    confidence: float | None = None

    created_at: datetime
    updated_at: datetime | None = None
    resolved_at: datetime | None = None


class ReportUpdateOut(BaseModel):
    """Audit trail entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    report_id: int
    user_id: int | None = None
    change_type: str
    from_value: str | None = None
    to_value: str | None = None
    comment: str | None = None
    created_at: datetime


class StatusChangeIn(BaseModel):
    status: ReportStatus


class AssignDepartmentIn(BaseModel):
    department_id: int


class ResolveIn(BaseModel):
    resolved_media_urls: list[str] = Field(default_factory=list)


class CommentIn(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)


class EscalateIn(BaseModel):
    reason: str | None = None
