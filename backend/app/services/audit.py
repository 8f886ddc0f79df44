"""Append-only audit trail for report state changes."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ChangeType, ReportUpdate


class AuditTrail:
    """
    Writes and reads ReportUpdate rows.

    ``record`` only adds the entry to the session. The caller owns the
    commit, so an entry becomes durable together with the change it
    describes.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def record(
        self,
        report_id: int,
        change_type: ChangeType,
        user_id: int | None = None,
        from_value: str | None = None,
        to_value: str | None = None,
        comment: str | None = None,
    ) -> ReportUpdate:
        entry = ReportUpdate(
            report_id=report_id,
            user_id=user_id,
            change_type=change_type,
            from_value=from_value,
            to_value=to_value,
            comment=comment,
        )
        self.db.add(entry)
        return entry

    async def history(self, report_id: int) -> list[ReportUpdate]:
        """Entries for a report, oldest first."""
        result = await self.db.execute(
            select(ReportUpdate)
            .where(ReportUpdate.report_id == report_id)
            .order_by(ReportUpdate.id)
        )
        return list(result.scalars().all())
