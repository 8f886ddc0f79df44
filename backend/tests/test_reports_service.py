"""Tests for ReportService orchestration."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy import select

from app.models import ChangeType, Notification, ReportStatus, ReportUpdate, User, UserRole
from app.schemas.report import ReportCreate
from app.services.errors import (
    DepartmentNotFound,
    InvalidStatusTransition,
    NotPermitted,
    ReportNotFound,
    ReportValidationError,
)
from app.services.reports import ReportService, parse_coordinates


@pytest.fixture
def service(db_session, notifier) -> ReportService:
    return ReportService(db_session, notifier=notifier, routing_enabled=True)


@pytest_asyncio.fixture
async def pwd_engineer(db_session, departments) -> User:
    user = User(
        name="PWD Engineer",
        email="engineer@example.com",
        role=UserRole.STAFF,
        department_id=departments["pwd"].id,
    )
    db_session.add(user)
    await db_session.commit()
    return user


async def _history(db_session, report_id: int) -> list[ReportUpdate]:
    result = await db_session.execute(
        select(ReportUpdate).where(ReportUpdate.report_id == report_id).order_by(ReportUpdate.id)
    )
    return list(result.scalars().all())


async def _notifications(db_session, user_id: int) -> list[Notification]:
    result = await db_session.execute(
        select(Notification).where(Notification.recipient_id == user_id).order_by(Notification.id)
    )
    return list(result.scalars().all())


class TestParseCoordinates:
    """Tests for coordinate validation."""

    def test_valid(self):
        assert parse_coordinates([77.5, 28.46]) == (77.5, 28.46)

    @pytest.mark.parametrize("bad", [None, [], [77.5], [77.5, 28.46, 0], [181, 0], [0, 91]])
    def test_invalid(self, bad):
        with pytest.raises(ReportValidationError):
            parse_coordinates(bad)


class TestCreateReport:
    """Tests for report submission."""

    @pytest.mark.asyncio
    async def test_create_routes_and_audits(
        self, db_session, service, connections, departments, citizen, admin, pwd_engineer
    ):
        """Test a pothole inside the PWD circle is routed on submission."""
        ws = AsyncMock()
        await connections.connect(ws)

        report = await service.create_report(
            citizen,
            ReportCreate(title="Deep pothole", category="pothole", coordinates=[77.50, 28.46]),
        )

        assert report.id is not None
        assert report.reporter_id == citizen.id
        assert report.assigned_department_id == departments["pwd"].id
        assert report.assigned_staff_id == pwd_engineer.id
        assert report.status == ReportStatus.ACKNOWLEDGED

        history = await _history(db_session, report.id)
        assert [u.change_type for u in history] == [
            ChangeType.CREATED,
            ChangeType.ASSIGNED,
            ChangeType.ASSIGNED_STAFF,
        ]

        # Anonymous socket sees the broadcast
        message = ws.send_json.call_args.args[0]
        assert message["event"] == "new_report"
        assert message["data"]["id"] == report.id

        assert len(await _notifications(db_session, admin.id)) == 1
        reporter_notes = await _notifications(db_session, citizen.id)
        assert [n.title for n in reporter_notes] == ["Report Assigned"]

    @pytest.mark.asyncio
    async def test_create_awards_points(self, service, departments, citizen):
        await service.create_report(
            citizen, ReportCreate(title="Overflowing bin", category="garbage", coordinates=[77.5, 28.47])
        )

        assert citizen.points == 5
        assert citizen.badges == ["first_report"]

    @pytest.mark.asyncio
    async def test_assisted_submission(self, service, departments, citizen):
        """Test AI-assisted reports carry severity and priority."""
        report = await service.create_report(
            citizen,
            ReportCreate(
                title="Water main leak",
                category="water",
                coordinates=[77.49, 28.48],
                processing_method="assisted",
                confidence=0.92,
                severity="high",
                suggested_priority="high",
            ),
        )

        assert report.urgency == "high"
        assert report.priority == "high"
        assert report.confidence == 0.92
        assert citizen.points == 8
        assert "ai_early_adopter" in citizen.badges

    @pytest.mark.asyncio
    async def test_invalid_coordinates_rejected(self, db_session, service, citizen):
        with pytest.raises(ReportValidationError):
            await service.create_report(
                citizen, ReportCreate(title="Nowhere", category="pothole", coordinates=[200, 28])
            )

        assert await service.list_reports() == []

    @pytest.mark.asyncio
    async def test_routing_disabled(self, db_session, notifier, departments, citizen):
        service = ReportService(db_session, notifier=notifier, routing_enabled=False)

        report = await service.create_report(
            citizen, ReportCreate(title="Pothole", category="pothole", coordinates=[77.50, 28.46])
        )

        assert report.assigned_department_id is None
        assert report.status == ReportStatus.NEW

    @pytest.mark.asyncio
    async def test_routing_failure_still_creates(self, db_session, service, departments, citizen):
        """Test a routing error leaves a persisted, unrouted report."""
        service.directory.departments_for_category = AsyncMock(side_effect=RuntimeError("timeout"))

        report = await service.create_report(
            citizen, ReportCreate(title="Pothole", category="pothole", coordinates=[77.50, 28.46])
        )

        assert report.id is not None
        assert report.assigned_department_id is None
        assert report.status == ReportStatus.NEW
        assert [u.change_type for u in await _history(db_session, report.id)] == [ChangeType.CREATED]


class TestTriage:
    """Tests for administrator actions."""

    @pytest.mark.asyncio
    async def test_change_status_records_audit(self, db_session, service, admin, make_report):
        report = await make_report(status=ReportStatus.ACKNOWLEDGED)

        await service.change_status(report.id, ReportStatus.IN_PROGRESS, admin)

        entry = (await _history(db_session, report.id))[-1]
        assert entry.change_type == ChangeType.STATUS_CHANGE
        assert entry.from_value == ReportStatus.ACKNOWLEDGED
        assert entry.to_value == ReportStatus.IN_PROGRESS
        assert entry.user_id == admin.id

    @pytest.mark.asyncio
    async def test_change_status_invalid(self, service, admin, make_report):
        report = await make_report(status=ReportStatus.RESOLVED)

        with pytest.raises(InvalidStatusTransition):
            await service.change_status(report.id, ReportStatus.IN_PROGRESS, admin)

    @pytest.mark.asyncio
    async def test_change_status_missing_report(self, service, admin):
        with pytest.raises(ReportNotFound):
            await service.change_status(999, ReportStatus.IN_PROGRESS, admin)

    @pytest.mark.asyncio
    async def test_resolving_via_admin_stamps_resolved_at(self, service, admin, make_report):
        report = await make_report(status=ReportStatus.IN_PROGRESS)

        await service.change_status(report.id, ReportStatus.RESOLVED, admin)

        assert report.resolved_at is not None

    @pytest.mark.asyncio
    async def test_assign_department_override(
        self, db_session, service, departments, admin, citizen, make_report
    ):
        """Test an override records both department names and keeps status."""
        report = await make_report(
            reporter=citizen,
            status=ReportStatus.ACKNOWLEDGED,
            assigned_department_id=departments["pwd"].id,
        )

        await service.assign_department(report.id, departments["sanitation"].id, admin)

        assert report.assigned_department_id == departments["sanitation"].id
        assert report.status == ReportStatus.ACKNOWLEDGED
        entry = (await _history(db_session, report.id))[0]
        assert entry.change_type == ChangeType.ASSIGNED
        assert entry.from_value == "Public Works Department (PWD)"
        assert entry.to_value == "Health & Sanitation Department"
        assert len(await _notifications(db_session, citizen.id)) == 1

    @pytest.mark.asyncio
    async def test_assign_department_clears_foreign_staff(
        self, db_session, service, departments, admin, pwd_engineer, make_report
    ):
        report = await make_report(
            assigned_department_id=departments["pwd"].id, assigned_staff_id=pwd_engineer.id
        )

        await service.assign_department(report.id, departments["water"].id, admin)

        assert report.assigned_staff_id is None

    @pytest.mark.asyncio
    async def test_assign_unknown_department(self, service, admin, make_report):
        report = await make_report()

        with pytest.raises(DepartmentNotFound):
            await service.assign_department(report.id, 999, admin)

    @pytest.mark.asyncio
    async def test_reroute(self, service, departments, admin, make_report):
        report = await make_report(category="garbage", coordinates=(77.60, 28.60))

        routed = await service.reroute(report.id, admin)

        assert routed.assigned_department_id == departments["sanitation"].id

    @pytest.mark.asyncio
    async def test_escalate(self, db_session, notifier, admin, citizen, make_report):
        escalation = MagicMock()
        escalation.send = AsyncMock(return_value=True)
        service = ReportService(db_session, notifier=notifier, escalation=escalation)
        report = await make_report(reporter=citizen)

        _, sent = await service.escalate(report.id, admin, reason="Open for two weeks")

        assert sent is True
        escalation.send.assert_awaited_once()
        assert escalation.send.call_args.args[1].id == citizen.id
        entry = (await _history(db_session, report.id))[-1]
        assert entry.change_type == ChangeType.ESCALATED
        assert entry.comment == "Open for two weeks"


class TestResolve:
    """Tests for staff resolution."""

    @pytest.mark.asyncio
    async def test_staff_resolves_own_department(
        self, db_session, service, departments, citizen, pwd_engineer, make_report
    ):
        report = await make_report(
            reporter=citizen,
            status=ReportStatus.IN_PROGRESS,
            assigned_department_id=departments["pwd"].id,
        )

        await service.resolve(report.id, pwd_engineer, ["https://cdn.example.com/after.jpg"])

        assert report.status == ReportStatus.RESOLVED
        assert report.resolved_at is not None
        assert report.resolved_by_id == pwd_engineer.id
        assert report.resolved_media_urls == ["https://cdn.example.com/after.jpg"]
        assert citizen.points == 25
        assert "problem_solver_1" in pwd_engineer.badges
        assert [n.title for n in await _notifications(db_session, citizen.id)] == ["Report Resolved"]

    @pytest.mark.asyncio
    async def test_staff_of_other_department_denied(
        self, service, departments, pwd_engineer, make_report
    ):
        report = await make_report(
            category="garbage",
            status=ReportStatus.IN_PROGRESS,
            assigned_department_id=departments["sanitation"].id,
        )

        with pytest.raises(NotPermitted):
            await service.resolve(report.id, pwd_engineer)

        assert report.status == ReportStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_already_resolved(self, service, departments, pwd_engineer, make_report):
        report = await make_report(
            status=ReportStatus.RESOLVED, assigned_department_id=departments["pwd"].id
        )

        with pytest.raises(InvalidStatusTransition):
            await service.resolve(report.id, pwd_engineer)

    @pytest.mark.asyncio
    async def test_staff_without_department_denied(self, db_session, service, make_report):
        """Test staff with no department cannot resolve an unrouted report."""
        orphan = User(name="Former PWD Engineer", email="former@example.com", role=UserRole.STAFF)
        db_session.add(orphan)
        await db_session.commit()
        report = await make_report(status=ReportStatus.IN_PROGRESS)

        with pytest.raises(NotPermitted):
            await service.resolve(report.id, orphan)

        assert report.status == ReportStatus.IN_PROGRESS
        assert report.resolved_by_id is None
        assert orphan.badges == []

    @pytest.mark.asyncio
    async def test_staff_cannot_resolve_unrouted(
        self, service, departments, pwd_engineer, make_report
    ):
        report = await make_report(status=ReportStatus.IN_PROGRESS)

        with pytest.raises(NotPermitted):
            await service.resolve(report.id, pwd_engineer)

    @pytest.mark.asyncio
    async def test_rejected_cannot_be_resolved(self, service, admin, make_report):
        report = await make_report(status=ReportStatus.REJECTED)

        with pytest.raises(InvalidStatusTransition):
            await service.resolve(report.id, admin)


class TestEngagement:
    """Tests for upvotes, comments and queries."""

    @pytest.mark.asyncio
    async def test_toggle_upvote(self, service, citizen, other_citizen, make_report):
        report = await make_report(reporter=citizen)

        await service.toggle_upvote(report.id, other_citizen)
        assert report.upvote_count == 1

        await service.toggle_upvote(report.id, citizen)
        assert report.upvote_count == 2

        await service.toggle_upvote(report.id, other_citizen)
        assert report.upvote_count == 1

    @pytest.mark.asyncio
    async def test_comment_notifies_reporter(
        self, db_session, service, citizen, admin, make_report
    ):
        report = await make_report(reporter=citizen)

        entry = await service.add_comment(report.id, admin, "Crew scheduled for Monday")

        assert entry.change_type == ChangeType.COMMENT
        assert entry.comment == "Crew scheduled for Monday"
        assert [n.title for n in await _notifications(db_session, citizen.id)] == ["New Comment"]

    @pytest.mark.asyncio
    async def test_own_comment_not_notified(self, db_session, service, citizen, make_report):
        report = await make_report(reporter=citizen)

        await service.add_comment(report.id, citizen, "Still there today")

        assert await _notifications(db_session, citizen.id) == []

    @pytest.mark.asyncio
    async def test_list_reports_filters(self, service, departments, make_report):
        pothole = await make_report(category="pothole", assigned_department_id=departments["pwd"].id)
        await make_report(category="garbage")

        assert [r.id for r in await service.list_reports(category="pothole")] == [pothole.id]
        assert [r.id for r in await service.list_reports(department_id=departments["pwd"].id)] == [
            pothole.id
        ]
        assert len(await service.list_reports()) == 2

    @pytest.mark.asyncio
    async def test_nearby_closest_first(self, service, make_report):
        close = await make_report(coordinates=(77.500, 28.460))
        near = await make_report(coordinates=(77.510, 28.460))
        await make_report(coordinates=(77.600, 28.600))

        found = await service.nearby([77.501, 28.460], radius_meters=2000)

        assert [r.id for r in found] == [close.id, near.id]

    @pytest.mark.asyncio
    async def test_nearby_invalid_point(self, service):
        with pytest.raises(ReportValidationError):
            await service.nearby([77.5])
