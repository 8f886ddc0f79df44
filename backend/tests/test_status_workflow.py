"""Tests for the report status state machine."""

from datetime import UTC, datetime

import pytest

from app.models import Report, ReportStatus
from app.services.errors import InvalidStatusTransition
from app.services.status_workflow import apply_status, can_transition

NEW = ReportStatus.NEW
ACK = ReportStatus.ACKNOWLEDGED
WIP = ReportStatus.IN_PROGRESS
DONE = ReportStatus.RESOLVED
REJ = ReportStatus.REJECTED


def _report(status: str = NEW) -> Report:
    return Report(title="Broken streetlight", longitude=77.5, latitude=28.46, status=status)


class TestCanTransition:
    """Tests for can_transition."""

    @pytest.mark.parametrize(
        "current,target",
        [(NEW, ACK), (ACK, WIP), (WIP, DONE), (NEW, WIP), (NEW, DONE), (ACK, DONE)],
    )
    def test_forward_moves_allowed(self, current, target):
        assert can_transition(current, target) is True

    @pytest.mark.parametrize("current", [NEW, ACK, WIP])
    def test_reject_from_any_open_state(self, current):
        assert can_transition(current, REJ) is True

    @pytest.mark.parametrize("current,target", [(ACK, NEW), (WIP, ACK), (WIP, NEW)])
    def test_backward_moves_rejected(self, current, target):
        assert can_transition(current, target) is False

    @pytest.mark.parametrize("current", [DONE, REJ])
    @pytest.mark.parametrize("target", [NEW, ACK, WIP, DONE, REJ])
    def test_terminal_states_are_final(self, current, target):
        assert can_transition(current, target) is False

    def test_accepts_plain_strings(self):
        assert can_transition("new", "in_progress") is True

    def test_unknown_status_raises(self):
        with pytest.raises(ValueError):
            can_transition("new", "closed")


class TestApplyStatus:
    """Tests for apply_status."""

    def test_returns_previous_status(self):
        report = _report(ACK)

        assert apply_status(report, WIP) == ACK
        assert report.status == WIP
        assert report.resolved_at is None

    def test_same_status_is_noop(self):
        report = _report(WIP)

        assert apply_status(report, WIP) is None
        assert report.status == WIP

    def test_invalid_transition_raises(self):
        report = _report(WIP)

        with pytest.raises(InvalidStatusTransition) as exc:
            apply_status(report, NEW)

        assert exc.value.current == WIP
        assert exc.value.target == NEW
        assert report.status == WIP

    def test_resolving_stamps_resolved_at(self):
        report = _report(WIP)
        now = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

        apply_status(report, DONE, now=now)

        assert report.status == DONE
        assert report.resolved_at == now

    def test_resolved_at_defaults_to_now(self):
        report = _report(WIP)
        before = datetime.now(UTC)

        apply_status(report, DONE)

        assert report.resolved_at >= before

    def test_resolved_at_never_overwritten(self):
        """Test a pre-existing resolved_at survives the transition."""
        first = datetime(2026, 1, 1, tzinfo=UTC)
        report = _report(WIP)
        report.resolved_at = first

        apply_status(report, DONE, now=datetime(2026, 2, 1, tzinfo=UTC))

        assert report.resolved_at == first

    def test_resolved_is_final(self):
        report = _report(DONE)

        with pytest.raises(InvalidStatusTransition):
            apply_status(report, WIP)

    def test_rejecting_does_not_stamp_resolved_at(self):
        report = _report(NEW)

        apply_status(report, REJ)

        assert report.resolved_at is None
