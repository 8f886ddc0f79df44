"""Administrator routes: triage, manual routing overrides and departments."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import AdminUser, Reports
from app.models import ReportStatus
from app.routers.errors import service_errors
from app.schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate
from app.schemas.report import (
    AssignDepartmentIn,
    EscalateIn,
    ReportOut,
    StatusChangeIn,
)
from app.services.directory import DepartmentDirectory

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


class EscalationResult(BaseModel):
    report: ReportOut
    notice_sent: bool


@router.get("/reports", response_model=list[ReportOut])
async def list_reports(
    admin: AdminUser,
    service: Reports,
    status: ReportStatus | None = None,
    category: str | None = None,
    priority: str | None = None,
    department_id: int | None = None,
) -> list[ReportOut]:
    """All reports, newest first, with optional filters."""
    reports = await service.list_reports(
        status=status, category=category, priority=priority, department_id=department_id
    )
    return [ReportOut.model_validate(r) for r in reports]


@router.put("/reports/{report_id}/status", response_model=ReportOut)
async def update_status(
    report_id: int, data: StatusChangeIn, admin: AdminUser, service: Reports
) -> ReportOut:
    with service_errors():
        report = await service.change_status(report_id, data.status, admin)
    return ReportOut.model_validate(report)


@router.put("/reports/{report_id}/assign", response_model=ReportOut)
async def assign_department(
    report_id: int, data: AssignDepartmentIn, admin: AdminUser, service: Reports
) -> ReportOut:
    with service_errors():
        report = await service.assign_department(report_id, data.department_id, admin)
    return ReportOut.model_validate(report)


@router.post("/reports/{report_id}/reroute", response_model=ReportOut)
async def reroute_report(report_id: int, admin: AdminUser, service: Reports) -> ReportOut:
    """Re-run automatic routing, e.g. after a category correction."""
    with service_errors():
        report = await service.reroute(report_id, admin)
    return ReportOut.model_validate(report)


@router.post("/reports/{report_id}/escalate", response_model=EscalationResult)
async def escalate_report(
    report_id: int, data: EscalateIn, admin: AdminUser, service: Reports
) -> EscalationResult:
    with service_errors():
        report, sent = await service.escalate(report_id, admin, data.reason)
    return EscalationResult(report=ReportOut.model_validate(report), notice_sent=sent)


@router.get("/departments", response_model=list[DepartmentOut])
async def list_departments(
    admin: AdminUser, db: Annotated[AsyncSession, Depends(get_db)]
) -> list[DepartmentOut]:
    departments = await DepartmentDirectory(db).list_departments()
    return [DepartmentOut.model_validate(d) for d in departments]


@router.post("/departments", response_model=DepartmentOut, status_code=201)
async def create_department(
    data: DepartmentCreate, admin: AdminUser, db: Annotated[AsyncSession, Depends(get_db)]
) -> DepartmentOut:
    department = await DepartmentDirectory(db).create(data)
    return DepartmentOut.model_validate(department)


@router.put("/departments/{department_id}", response_model=DepartmentOut)
async def update_department(
    department_id: int,
    data: DepartmentUpdate,
    admin: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DepartmentOut:
    with service_errors():
        department = await DepartmentDirectory(db).update(department_id, data)
    return DepartmentOut.model_validate(department)
