"""Report status state machine."""

from datetime import UTC, datetime

from app.models import Report, ReportStatus
from app.services.errors import InvalidStatusTransition

# Forward order of the main lifecycle. REJECTED is a parallel terminal branch.
LIFECYCLE = (
    ReportStatus.NEW,
    ReportStatus.ACKNOWLEDGED,
    ReportStatus.IN_PROGRESS,
    ReportStatus.RESOLVED,
)
TERMINAL = frozenset({ReportStatus.RESOLVED, ReportStatus.REJECTED})


def can_transition(current: str, target: str) -> bool:
    """
    Check whether ``current -> target`` is allowed.

    - terminal states never change
    - REJECTED is reachable from any non-terminal state
    - otherwise status only moves forward (skipping steps is allowed)
    """
    current = ReportStatus(current)
    target = ReportStatus(target)

    if current in TERMINAL:
        return False
    if target == ReportStatus.REJECTED:
        return True
    return LIFECYCLE.index(target) > LIFECYCLE.index(current)


def apply_status(report: Report, target: str, now: datetime | None = None) -> str | None:
    """
    Move ``report`` to ``target``.

    Returns the previous status, or None when the report already has that
    status (no-op). Raises InvalidStatusTransition for any disallowed move.
    ``resolved_at`` is stamped once, on entry to RESOLVED.
    """
    target = ReportStatus(target)
    if report.status == target:
        return None
    if not can_transition(report.status, target):
        raise InvalidStatusTransition(report.status, target)

    previous = report.status
    report.status = target
    if target == ReportStatus.RESOLVED and report.resolved_at is None:
        report.resolved_at = now or datetime.now(UTC)
    return previous
