"""Tests for staff load balancing."""

from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy import select

from app.models import ChangeType, ReportStatus, ReportUpdate, User, UserRole
from app.services.load_balancer import StaffLoadBalancer, pick_least_loaded


def _staff(*ids: int) -> list[SimpleNamespace]:
    return [SimpleNamespace(id=i) for i in ids]


class TestPickLeastLoaded:
    """Tests for the pure selection rule."""

    def test_empty(self):
        assert pick_least_loaded([], {}) is None

    def test_minimum_load_wins(self):
        """Test loads [3, 1, 1] select the second staff member."""
        a, b, c = _staff(1, 2, 3)

        assert pick_least_loaded([a, b, c], {1: 3, 2: 1, 3: 1}) is b

    def test_missing_load_counts_as_zero(self):
        a, b = _staff(1, 2)

        assert pick_least_loaded([a, b], {1: 2}) is b

    def test_all_equal_first_wins(self):
        a, b, c = _staff(5, 3, 9)

        assert pick_least_loaded([a, b, c], {}) is a


@pytest_asyncio.fixture
async def pwd_staff(db_session, departments) -> list[User]:
    """Three PWD staff members plus one from Sanitation."""
    members = [
        User(
            name=f"PWD Engineer {i}",
            email=f"pwd{i}@example.com",
            role=UserRole.STAFF,
            department_id=departments["pwd"].id,
        )
        for i in range(1, 4)
    ]
    outsider = User(
        name="Sanitation Inspector",
        email="sanitation@example.com",
        role=UserRole.STAFF,
        department_id=departments["sanitation"].id,
    )
    for user in (*members, outsider):
        db_session.add(user)
        await db_session.flush()
    await db_session.commit()
    return members


class TestStaffLoadBalancer:
    """Tests for StaffLoadBalancer against the database."""

    @pytest.mark.asyncio
    async def test_candidates_only_department_staff(self, db_session, departments, pwd_staff, admin):
        balancer = StaffLoadBalancer(db_session)

        candidates = await balancer.candidates(departments["pwd"].id)

        assert [u.id for u in candidates] == [u.id for u in pwd_staff]

    @pytest.mark.asyncio
    async def test_open_loads_ignore_resolved(self, db_session, departments, pwd_staff, make_report):
        first, second, _ = pwd_staff
        await make_report(assigned_staff_id=first.id, status=ReportStatus.IN_PROGRESS)
        await make_report(assigned_staff_id=first.id, status=ReportStatus.RESOLVED)
        await make_report(assigned_staff_id=second.id, status=ReportStatus.REJECTED)

        loads = await StaffLoadBalancer(db_session).open_loads([u.id for u in pwd_staff])

        assert loads == {first.id: 1, second.id: 1}

    @pytest.mark.asyncio
    async def test_assigns_least_loaded(self, db_session, departments, pwd_staff, make_report):
        """Test loads [3, 1, 1] assign the second-enumerated staff member."""
        first, second, third = pwd_staff
        for _ in range(3):
            await make_report(assigned_staff_id=first.id, status=ReportStatus.ACKNOWLEDGED)
        await make_report(assigned_staff_id=second.id, status=ReportStatus.IN_PROGRESS)
        await make_report(assigned_staff_id=third.id, status=ReportStatus.NEW)
        report = await make_report()

        chosen = await StaffLoadBalancer(db_session).assign_staff(report, departments["pwd"])
        await db_session.commit()

        assert chosen.id == second.id
        assert report.assigned_staff_id == second.id
        entries = (
            await db_session.execute(
                select(ReportUpdate).where(ReportUpdate.report_id == report.id)
            )
        ).scalars().all()
        assert len(entries) == 1
        assert entries[0].change_type == ChangeType.ASSIGNED_STAFF
        assert entries[0].to_value == second.name
        assert entries[0].from_value is None

    @pytest.mark.asyncio
    async def test_resolved_reports_do_not_count(self, db_session, departments, pwd_staff, make_report):
        first, _, _ = pwd_staff
        for _ in range(5):
            await make_report(assigned_staff_id=first.id, status=ReportStatus.RESOLVED)
        report = await make_report()

        chosen = await StaffLoadBalancer(db_session).assign_staff(report, departments["pwd"])

        assert chosen.id == first.id

    @pytest.mark.asyncio
    async def test_report_not_counted_against_its_own_staff(
        self, db_session, departments, pwd_staff, make_report
    ):
        """Test re-balancing does not penalize the current assignee for this report."""
        first, second, third = pwd_staff
        await make_report(assigned_staff_id=second.id, status=ReportStatus.IN_PROGRESS)
        await make_report(assigned_staff_id=third.id, status=ReportStatus.IN_PROGRESS)
        report = await make_report(assigned_staff_id=first.id, status=ReportStatus.IN_PROGRESS)

        chosen = await StaffLoadBalancer(db_session).assign_staff(report, departments["pwd"])

        assert chosen.id == first.id

    @pytest.mark.asyncio
    async def test_department_without_staff(self, db_session, departments, pwd_staff, make_report):
        """Test zero staff leaves the report without a staff member."""
        report = await make_report(category="water")

        chosen = await StaffLoadBalancer(db_session).assign_staff(report, departments["water"])
        await db_session.commit()

        assert chosen is None
        assert report.assigned_staff_id is None
        entries = (
            await db_session.execute(
                select(ReportUpdate).where(ReportUpdate.report_id == report.id)
            )
        ).scalars().all()
        assert entries == []

    @pytest.mark.asyncio
    async def test_stale_staff_cleared_when_department_has_none(
        self, db_session, departments, pwd_staff, make_report
    ):
        """Test moving to a staffless department drops the old assignee."""
        report = await make_report(assigned_staff_id=pwd_staff[0].id)

        chosen = await StaffLoadBalancer(db_session).assign_staff(report, departments["water"])
        await db_session.commit()

        assert chosen is None
        assert report.assigned_staff_id is None
        entry = (
            await db_session.execute(
                select(ReportUpdate).where(ReportUpdate.report_id == report.id)
            )
        ).scalar_one()
        assert entry.change_type == ChangeType.ASSIGNED_STAFF
        assert entry.from_value == str(pwd_staff[0].id)
        assert entry.to_value is None
