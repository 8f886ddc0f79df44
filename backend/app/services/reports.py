"""Report lifecycle service: creation, triage, resolution and engagement."""

import logging
import math
from collections.abc import Sequence

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.models import (
    ChangeType,
    Department,
    ProcessingMethod,
    Report,
    ReportStatus,
    ReportUpdate,
    User,
    UserRole,
    report_upvotes,
)
from app.schemas.report import ReportCreate, ReportOut
from app.services import gamification
from app.services.audit import AuditTrail
from app.services.directory import DepartmentDirectory
from app.services.errors import (
    InvalidStatusTransition,
    NotPermitted,
    ReportNotFound,
    ReportValidationError,
)
from app.services.escalation import EscalationNotifier
from app.services.geo import distance_meters, is_valid_point
from app.services.load_balancer import StaffLoadBalancer
from app.services.notifications import NotificationDispatcher
from app.services.routing import RoutingEngine
from app.services.status_workflow import apply_status

logger = logging.getLogger(__name__)
settings = get_settings()

METERS_PER_DEGREE_LAT = 111_320
DEFAULT_NEARBY_RADIUS_METERS = 2000


def parse_coordinates(coordinates: Sequence[float] | None) -> tuple[float, float]:
    """Validate a [lng, lat] pair submitted by a client."""
    if coordinates is None or len(coordinates) != 2 or not is_valid_point(coordinates):
        raise ReportValidationError("Invalid coordinates format. Expected [lng, lat].")
    return float(coordinates[0]), float(coordinates[1])


class ReportService:
    """
    Orchestrates report state changes and their side effects.

    Business changes and their audit entries are committed first. Routing,
    notifications and broadcasts follow and are best-effort: none of them
    can fail the operation that triggered them.
    """

    def __init__(
        self,
        db: AsyncSession,
        notifier: NotificationDispatcher | None = None,
        escalation: EscalationNotifier | None = None,
        routing_enabled: bool = settings.auto_routing_enabled,
    ):
        self.db = db
        self.audit = AuditTrail(db)
        self.directory = DepartmentDirectory(db)
        self.balancer = StaffLoadBalancer(db, self.audit)
        self.routing = RoutingEngine(db, self.directory, self.balancer, self.audit)
        self.notifier = notifier or NotificationDispatcher()
        self.escalation = escalation or EscalationNotifier()
        self.routing_enabled = routing_enabled

    async def get(self, report_id: int) -> Report:
        report = await self.db.get(Report, report_id)
        if report is None:
            raise ReportNotFound(f"Report {report_id} not found")
        return report

    async def _department_name(self, department_id: int | None) -> str | None:
        if department_id is None:
            return None
        department = await self.db.get(Department, department_id)
        return department.name if department else str(department_id)

    async def _notify_reporter(self, report: Report, title: str, body: str) -> None:
        if report.reporter_id is not None:
            await self.notifier.notify(report.reporter_id, title, body, report.id)

    # -- creation and routing -------------------------------------------------

    async def create_report(self, reporter: User, data: ReportCreate) -> Report:
        longitude, latitude = parse_coordinates(data.coordinates)

        urgency = priority = "medium"
        if data.processing_method == ProcessingMethod.ASSISTED:
            urgency = data.severity or "medium"
            priority = data.suggested_priority or "medium"

        report = Report(
            reporter_id=reporter.id,
            title=data.title,
            description=data.description,
            category=data.category,
            longitude=longitude,
            latitude=latitude,
            status=ReportStatus.NEW,
            priority=priority,
            urgency=urgency,
            media_urls=list(data.media_urls),
            processing_method=data.processing_method,
            confidence=data.confidence if data.confidence is not None else 0.5,
        )
        self.db.add(report)
        await self.db.flush()

        self.audit.record(
            report.id, ChangeType.CREATED, user_id=reporter.id, to_value=ReportStatus.NEW
        )
        await gamification.award_report_points(self.db, reporter, data.processing_method)
        await self.db.commit()
        logger.info(f"Report {report.id} created by user {reporter.id} ({report.category})")
        reporter_name = reporter.name

        if self.routing_enabled:
            await self.route(report)

        await self.notifier.broadcast(
            "new_report", ReportOut.model_validate(report).model_dump(mode="json")
        )
        assisted = data.processing_method == ProcessingMethod.ASSISTED
        await self.notifier.notify_admins(
            "New AI-Assisted Report Submitted" if assisted else "New Report Submitted",
            f'A {data.processing_method} report "{report.title}" was submitted by {reporter_name}.',
            report.id,
        )
        return report

    async def route(self, report: Report, acting_user_id: int | None = None) -> Report:
        """Run the routing engine and tell the reporter about a new department."""
        previous_department = report.assigned_department_id
        report = await self.routing.route_report(report, acting_user_id)

        if (
            report.assigned_department_id is not None
            and report.assigned_department_id != previous_department
        ):
            name = await self._department_name(report.assigned_department_id)
            await self._notify_reporter(
                report,
                "Report Assigned",
                f'Your report "{report.title}" has been assigned to {name}.',
            )
        return report

    async def reroute(self, report_id: int, actor: User) -> Report:
        report = await self.get(report_id)
        return await self.route(report, acting_user_id=actor.id)

    # -- administrator triage ---------------------------------------------------

    async def change_status(self, report_id: int, target: ReportStatus, actor: User) -> Report:
        report = await self.get(report_id)
        previous = apply_status(report, target)
        if previous is None:
            return report

        self.audit.record(
            report.id,
            ChangeType.STATUS_CHANGE,
            user_id=actor.id,
            from_value=previous,
            to_value=target,
        )
        await self.db.commit()
        logger.info(f"Report {report.id} status {previous} -> {target} by user {actor.id}")

        await self._notify_reporter(
            report,
            "Report Status Updated",
            f'The status of your report "{report.title}" changed from '
            f"{previous} to {target}.",
        )
        return report

    async def assign_department(self, report_id: int, department_id: int, actor: User) -> Report:
        """Administrator override of the department, followed by staff re-balancing."""
        report = await self.get(report_id)
        department = await self.directory.get(department_id)
        if report.assigned_department_id == department.id:
            return report

        previous_name = await self._department_name(report.assigned_department_id)
        report.assigned_department_id = department.id
        self.audit.record(
            report.id,
            ChangeType.ASSIGNED,
            user_id=actor.id,
            from_value=previous_name,
            to_value=department.name,
        )
        await self.balancer.assign_staff(report, department, actor.id)
        await self.db.commit()
        logger.info(f"Report {report.id} reassigned to department {department.id} by user {actor.id}")

        await self._notify_reporter(
            report,
            "Report Assigned",
            f'Your report "{report.title}" has been assigned to {department.name}.',
        )
        return report

    async def escalate(self, report_id: int, actor: User, reason: str | None = None) -> tuple[Report, bool]:
        report = await self.get(report_id)
        self.audit.record(
            report.id,
            ChangeType.ESCALATED,
            user_id=actor.id,
            from_value=report.status,
            to_value="escalated",
            comment=reason,
        )
        await self.db.commit()

        reporter = await self.db.get(User, report.reporter_id) if report.reporter_id else None
        sent = await self.escalation.send(report, reporter, reason)
        return report, sent

    # -- staff resolution -------------------------------------------------------

    async def resolve(
        self, report_id: int, staff: User, resolved_media_urls: Sequence[str] = ()
    ) -> Report:
        report = await self.get(report_id)
        if staff.role == UserRole.STAFF and (
            staff.department_id is None
            or report.assigned_department_id is None
            or report.assigned_department_id != staff.department_id
        ):
            raise NotPermitted("Report is not assigned to your department")

        previous = apply_status(report, ReportStatus.RESOLVED)
        if previous is None:
            raise InvalidStatusTransition(report.status, ReportStatus.RESOLVED)

        report.resolved_by_id = staff.id
        report.resolved_media_urls = list(resolved_media_urls)
        self.audit.record(
            report.id,
            ChangeType.STATUS_CHANGE,
            user_id=staff.id,
            from_value=previous,
            to_value=ReportStatus.RESOLVED,
        )
        await self.db.flush()

        reporter = await self.db.get(User, report.reporter_id) if report.reporter_id else None
        if reporter is not None:
            gamification.award_resolution_points(reporter)
        await gamification.award_staff_milestones(self.db, staff)
        await self.db.commit()
        logger.info(f"Report {report.id} resolved by user {staff.id}")

        await self._notify_reporter(
            report,
            "Report Resolved",
            f'Your report "{report.title}" has been resolved. Thank you for helping your city!',
        )
        return report

    # -- engagement ---------------------------------------------------------------

    async def toggle_upvote(self, report_id: int, user: User) -> Report:
        report = await self.get(report_id)
        existing = await self.db.scalar(
            select(func.count())
            .select_from(report_upvotes)
            .where(report_upvotes.c.report_id == report.id, report_upvotes.c.user_id == user.id)
        )
        if existing:
            await self.db.execute(
                delete(report_upvotes).where(
                    report_upvotes.c.report_id == report.id,
                    report_upvotes.c.user_id == user.id,
                )
            )
        else:
            await self.db.execute(insert(report_upvotes).values(report_id=report.id, user_id=user.id))

        report.upvote_count = await self.db.scalar(
            select(func.count()).select_from(report_upvotes).where(report_upvotes.c.report_id == report.id)
        ) or 0

        if report.reporter_id is not None:
            reporter = await self.db.get(User, report.reporter_id)
            if reporter is not None:
                gamification.check_community_voice(reporter, report.upvote_count)

        await self.db.commit()
        return report

    async def add_comment(self, report_id: int, author: User, text: str) -> ReportUpdate:
        report = await self.get(report_id)
        entry = self.audit.record(report.id, ChangeType.COMMENT, user_id=author.id, comment=text)
        await self.db.commit()

        if report.reporter_id is not None and report.reporter_id != author.id:
            await self._notify_reporter(
                report, "New Comment", f'{author.name} commented on your report "{report.title}".'
            )
        return entry

    # -- queries --------------------------------------------------------------------

    async def history(self, report_id: int) -> list[ReportUpdate]:
        report = await self.get(report_id)
        return await self.audit.history(report.id)

    async def list_reports(
        self,
        status: str | None = None,
        category: str | None = None,
        priority: str | None = None,
        department_id: int | None = None,
        reporter_id: int | None = None,
        limit: int = 100,
    ) -> list[Report]:
        """Reports matching the filters, newest first."""
        query = select(Report).order_by(Report.created_at.desc(), Report.id.desc()).limit(limit)
        if status:
            query = query.where(Report.status == status)
        if category:
            query = query.where(Report.category == category)
        if priority:
            query = query.where(Report.priority == priority)
        if department_id is not None:
            query = query.where(Report.assigned_department_id == department_id)
        if reporter_id is not None:
            query = query.where(Report.reporter_id == reporter_id)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def nearby(
        self,
        coordinates: Sequence[float],
        radius_meters: float = DEFAULT_NEARBY_RADIUS_METERS,
        category: str | None = None,
        limit: int = 50,
    ) -> list[Report]:
        """Reports within ``radius_meters`` of a point, closest first."""
        longitude, latitude = parse_coordinates(coordinates)

        # Bounding-box prefilter, then exact haversine
        dlat = radius_meters / METERS_PER_DEGREE_LAT
        cos_lat = max(math.cos(math.radians(latitude)), 1e-6)
        dlng = min(radius_meters / (METERS_PER_DEGREE_LAT * cos_lat), 180.0)

        query = select(Report).where(
            Report.latitude.between(latitude - dlat, latitude + dlat),
            Report.longitude.between(longitude - dlng, longitude + dlng),
        )
        if category:
            query = query.where(Report.category == category)

        result = await self.db.execute(query)
        origin = (longitude, latitude)
        ranked = sorted(
            (
                (distance_meters(origin, report.location), report.id, report)
                for report in result.scalars().all()
            ),
            key=lambda item: (item[0], item[1]),
        )
        return [report for distance, _, report in ranked if distance <= radius_meters][:limit]
