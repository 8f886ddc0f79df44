"""Append-only audit trail of report state changes."""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models._time import utcnow


class ChangeType(StrEnum):
    CREATED = "created"
    STATUS_CHANGE = "status_change"
    ASSIGNED = "assigned"
    ASSIGNED_STAFF = "assigned_staff"
    COMMENT = "comment"
    ESCALATED = "escalated"


class ReportUpdate(Base):
    """
    One entry per mutating action on a report.

    Rows are never edited or deleted. ``user_id`` is NULL when the action
    was performed by the system (e.g. automatic routing).
    """

    __tablename__ = "report_updates"

    id: Mapped[int] = mapped_column(primary_key=True)
    report_id: Mapped[int] = mapped_column(
        ForeignKey("reports.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    change_type: Mapped[str] = mapped_column(String(20), nullable=False)
    from_value: Mapped[str | None] = mapped_column(String(255))
    to_value: Mapped[str | None] = mapped_column(String(255))
    comment: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("idx_updates_report", report_id, id),)

    def __repr__(self) -> str:
        return f"<ReportUpdate {self.report_id}: {self.change_type} -> {self.to_value}>"
