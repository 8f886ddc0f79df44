"""Staff load balancer: picks the least-loaded staff member of a department."""

import logging
from collections.abc import Mapping, Sequence
from typing import TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ChangeType, Department, Report, ReportStatus, User, UserRole
from app.services.audit import AuditTrail

logger = logging.getLogger(__name__)

T = TypeVar("T")


def pick_least_loaded(candidates: Sequence[T], loads: Mapping[int, int]) -> T | None:
    """
    Return the candidate with the strictly smallest load.

    Candidates missing from ``loads`` have zero open reports. On equal load
    the first-enumerated candidate wins.
    """
    chosen: T | None = None
    chosen_load = 0
    for candidate in candidates:
        load = loads.get(candidate.id, 0)
        if chosen is None or load < chosen_load:
            chosen, chosen_load = candidate, load
    return chosen


class StaffLoadBalancer:
    """
    Assigns a report to the staff member with the fewest open reports.

    Count-then-assign runs without a lock: two reports routed at the same
    time can both pick the same staff member. Balance is best-effort.
    """

    def __init__(self, db: AsyncSession, audit: AuditTrail | None = None):
        self.db = db
        self.audit = audit or AuditTrail(db)

    async def candidates(self, department_id: int) -> list[User]:
        """Staff users of a department, in enumeration (id) order."""
        result = await self.db.execute(
            select(User)
            .where(User.role == UserRole.STAFF, User.department_id == department_id)
            .order_by(User.id)
        )
        return list(result.scalars().all())

    async def open_loads(
        self, staff_ids: Sequence[int], exclude_report_id: int | None = None
    ) -> dict[int, int]:
        """Count non-resolved reports assigned to each staff member."""
        if not staff_ids:
            return {}

        query = (
            select(Report.assigned_staff_id, func.count(Report.id))
            .where(
                Report.assigned_staff_id.in_(staff_ids),
                Report.status != ReportStatus.RESOLVED,
            )
            .group_by(Report.assigned_staff_id)
        )
        if exclude_report_id is not None:
            query = query.where(Report.id != exclude_report_id)

        result = await self.db.execute(query)
        return {staff_id: count for staff_id, count in result.all()}

    async def assign_staff(
        self,
        report: Report,
        department: Department,
        acting_user_id: int | None = None,
    ) -> User | None:
        """
        Set ``report.assigned_staff_id`` and record the audit entry.

        Does not commit. If the department has no staff, any previous staff
        assignment is cleared so staff always belongs to the assigned
        department.
        """
        staff = await self.candidates(department.id)
        if not staff:
            logger.info(f"Department {department.name!r} has no staff; report {report.id} unassigned")
            if report.assigned_staff_id is not None:
                previous = report.assigned_staff_id
                report.assigned_staff_id = None
                self.audit.record(
                    report.id,
                    ChangeType.ASSIGNED_STAFF,
                    user_id=acting_user_id,
                    from_value=str(previous),
                    to_value=None,
                )
            return None

        loads = await self.open_loads([member.id for member in staff], exclude_report_id=report.id)
        chosen = pick_least_loaded(staff, loads)
        if chosen is None:
            return None

        previous = report.assigned_staff_id
        report.assigned_staff_id = chosen.id
        self.audit.record(
            report.id,
            ChangeType.ASSIGNED_STAFF,
            user_id=acting_user_id,
            from_value=str(previous) if previous is not None else None,
            to_value=chosen.name,
        )
        logger.info(
            f"Report {report.id} assigned to staff {chosen.id} "
            f"(open load {loads.get(chosen.id, 0)})"
        )
        return chosen
