"""API routes for citizen report submission and engagement."""

import logging
from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import CurrentUser, Reports
from app.routers.errors import service_errors
from app.schemas.analysis import AnalysisRequest, AnalysisResult
from app.schemas.report import CommentIn, ReportCreate, ReportOut, ReportUpdateOut
from app.services.analysis import AnalysisClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportOut, status_code=201)
async def create_report(data: ReportCreate, user: CurrentUser, service: Reports) -> ReportOut:
    """
    Submit a new report.

    Routing and notifications run after the report is stored; their
    failures never affect the response.
    """
    with service_errors():
        report = await service.create_report(user, data)
    return ReportOut.model_validate(report)


@router.post("/analyze", response_model=AnalysisResult)
async def analyze_report(data: AnalysisRequest, user: CurrentUser) -> AnalysisResult:
    """Pre-fill report fields with the AI analysis service (fallback on failure)."""
    return await AnalysisClient().analyze(data)


@router.get("/mine", response_model=list[ReportOut])
async def my_reports(user: CurrentUser, service: Reports) -> list[ReportOut]:
    reports = await service.list_reports(reporter_id=user.id)
    return [ReportOut.model_validate(r) for r in reports]


@router.get("/nearby", response_model=list[ReportOut])
async def nearby_reports(
    user: CurrentUser,
    service: Reports,
    lng: float = Query(..., ge=-180, le=180),
    lat: float = Query(..., ge=-90, le=90),
    radius: Annotated[float, Query(gt=0, le=50_000)] = 2000,
    category: str | None = None,
) -> list[ReportOut]:
    """Reports within ``radius`` meters, closest first."""
    with service_errors():
        reports = await service.nearby([lng, lat], radius_meters=radius, category=category)
    return [ReportOut.model_validate(r) for r in reports]


@router.get("/{report_id}", response_model=ReportOut)
async def get_report(report_id: int, user: CurrentUser, service: Reports) -> ReportOut:
    with service_errors():
        report = await service.get(report_id)
    return ReportOut.model_validate(report)


@router.get("/{report_id}/updates", response_model=list[ReportUpdateOut])
async def report_updates(report_id: int, user: CurrentUser, service: Reports) -> list[ReportUpdateOut]:
    """Audit trail of a report, oldest first."""
    with service_errors():
        entries = await service.history(report_id)
    return [ReportUpdateOut.model_validate(e) for e in entries]


@router.post("/{report_id}/upvote", response_model=ReportOut)
async def toggle_upvote(report_id: int, user: CurrentUser, service: Reports) -> ReportOut:
    with service_errors():
        report = await service.toggle_upvote(report_id, user)
    return ReportOut.model_validate(report)


@router.post("/{report_id}/comments", response_model=ReportUpdateOut, status_code=201)
async def add_comment(
    report_id: int, data: CommentIn, user: CurrentUser, service: Reports
) -> ReportUpdateOut:
    with service_errors():
        entry = await service.add_comment(report_id, user, data.text)
    return ReportUpdateOut.model_validate(entry)
