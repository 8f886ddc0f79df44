"""Staff routes."""

from fastapi import APIRouter

from app.dependencies import Reports, StaffUser
from app.routers.errors import service_errors
from app.schemas.report import ReportOut, ResolveIn

router = APIRouter(prefix="/staff", tags=["staff"])


@router.get("/reports", response_model=list[ReportOut])
async def my_tasks(staff: StaffUser, service: Reports) -> list[ReportOut]:
    """Reports routed to the caller's department."""
    reports = await service.list_reports(department_id=staff.department_id)
    return [ReportOut.model_validate(r) for r in reports]


@router.put("/reports/{report_id}/resolve", response_model=ReportOut)
async def resolve_report(
    report_id: int, data: ResolveIn, staff: StaffUser, service: Reports
) -> ReportOut:
    """Mark a report resolved with optional "after" photos."""
    with service_errors():
        report = await service.resolve(report_id, staff, data.resolved_media_urls)
    return ReportOut.model_validate(report)
