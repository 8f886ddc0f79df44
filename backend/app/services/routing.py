"""
Routing engine: assigns a report to a department and a staff member.

Selection policy, in priority order:

1. Containment. The first candidate (directory order) with a service area
   whose circle contains the report location. Ties are broken by
   directory order, not by distance.
2. Nearest center. Otherwise the department owning the service-area
   center closest to the report. Equal distances keep the earlier
   department.
3. First candidate, when no candidate has a usable service area.
"""

import logging
import math
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ChangeType, Department, Report, ReportStatus
from app.services.audit import AuditTrail
from app.services.directory import DepartmentDirectory
from app.services.errors import RoutingBudgetExceeded
from app.services.geo import distance_meters
from app.services.load_balancer import StaffLoadBalancer

logger = logging.getLogger(__name__)

# Upper bound on distance evaluations per routing attempt
MAX_AREA_EVALUATIONS = 10_000


def select_department(
    candidates: Sequence[Department],
    location: Sequence[float] | None,
    max_evaluations: int = MAX_AREA_EVALUATIONS,
) -> Department | None:
    """Pick the owning department among category-matching candidates."""
    if not candidates:
        return None

    total_areas = sum(len(dept.service_areas) for dept in candidates)
    if total_areas > max_evaluations:
        raise RoutingBudgetExceeded(
            f"{total_areas} service areas exceed the routing budget of {max_evaluations}"
        )

    # Distances are computed once and reused by both passes
    distances: list[tuple[Department, float, float]] = [
        (dept, distance_meters(location, area.center), area.radius_meters)
        for dept in candidates
        for area in dept.service_areas
    ]

    for dept, distance, radius in distances:
        if distance <= radius:
            return dept

    nearest: Department | None = None
    nearest_distance = math.inf
    for dept, distance, _ in distances:
        if distance < nearest_distance:
            nearest, nearest_distance = dept, distance

    return nearest if nearest is not None else candidates[0]


class RoutingEngine:
    """
    Best-effort routing for new or re-triaged reports.

    ``route_report`` never raises. Department assignment, status promotion,
    staff assignment and their audit entries are committed together; on
    any failure the transaction is rolled back and the report is returned
    in its persisted, unrouted state.
    """

    def __init__(
        self,
        db: AsyncSession,
        directory: DepartmentDirectory | None = None,
        balancer: StaffLoadBalancer | None = None,
        audit: AuditTrail | None = None,
    ):
        self.db = db
        self.audit = audit or AuditTrail(db)
        self.directory = directory or DepartmentDirectory(db)
        self.balancer = balancer or StaffLoadBalancer(db, self.audit)

    async def route_report(self, report: Report, acting_user_id: int | None = None) -> Report:
        if not report.category:
            return report

        report_id = report.id

        try:
            candidates = await self.directory.departments_for_category(report.category)
            if not candidates:
                logger.info(
                    f"No department serves category {report.category!r}; "
                    f"report {report_id} left unassigned"
                )
                return report

            department = select_department(candidates, report.location)
            if department is None:
                return report

            report.assigned_department_id = department.id
            if report.status == ReportStatus.NEW:
                report.status = ReportStatus.ACKNOWLEDGED
            await self.db.flush()

            self.audit.record(
                report.id,
                ChangeType.ASSIGNED,
                user_id=acting_user_id,
                to_value=department.name,
            )

            await self.balancer.assign_staff(report, department, acting_user_id)
            await self.db.commit()
        except Exception as e:
            logger.error(f"Auto-routing failed for report {report_id}: {e}", exc_info=True)
            await self._restore(report, report_id)
            return report

        logger.info(f"Report {report_id} routed to department {department.id} ({department.name})")
        return report

    async def _restore(self, report: Report, report_id: int | None) -> None:
        """Discard partial routing changes and reload the persisted report."""
        try:
            await self.db.rollback()
            await self.db.refresh(report)
        except Exception as e:
            logger.warning(f"Could not reload report {report_id} after failed routing: {e}")
