"""Report model for citizen-submitted civic issues."""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models._time import utcnow


class ReportCategory(StrEnum):
    POTHOLE = "pothole"
    STREETLIGHT = "streetlight"
    GARBAGE = "garbage"
    WATER = "water"
    TREE = "tree"
    OTHER = "other"


class ReportStatus(StrEnum):
    NEW = "new"
    ACKNOWLEDGED = "acknowledged"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ProcessingMethod(StrEnum):
    MANUAL = "manual"
    ASSISTED = "assisted"  # pre-filled by the AI analysis service


report_upvotes = Table(
    "report_upvotes",
    Base.metadata,
    Column("report_id", ForeignKey("reports.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Report(Base):
    """
    Citizen-submitted civic issue.

    Location is immutable after creation. Department and staff assignment
    are written by the routing engine and by administrator overrides.
    """

    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(primary_key=True)
    reporter_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String(20), index=True)

    # Location [lng, lat]
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), default=ReportStatus.NEW, nullable=False, index=True
    )
    priority: Mapped[str] = mapped_column(String(10), default="medium", nullable=False)
    urgency: Mapped[str] = mapped_column(String(10), default="medium", nullable=False)

    # Assignment
    assigned_department_id: Mapped[int | None] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"), index=True
    )
    assigned_staff_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True
    )

    # Media
    media_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    resolved_media_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    resolved_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    upvote_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)

    # Submission metadata
    processing_method: Mapped[str] = mapped_column(
        String(20), default=ProcessingMethod.MANUAL, nullable=False
    )
    confidence: Mapped[float | None] = mapped_column(Float)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        # Staff load counts: assigned_staff_id + status
        Index("idx_reports_staff_status", assigned_staff_id, status),
        Index("idx_reports_created", created_at.desc(), id.desc()),
    )

    @property
    def location(self) -> tuple[float, float]:
        return (self.longitude, self.latitude)

    def __repr__(self) -> str:
        return f"<Report {self.id}: {self.category} ({self.status})>"
