"""Admin report request endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session
from diligence_labs.core.database.entities.consultations import Report
from diligence_labs.core.errors import NotFoundError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import ReportStatus
from diligence_labs.core.models.io.reports import AdminReportUpdate, ReportRead
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.deps import ModeratorDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=List[ReportRead],
    summary="List All Reports",
    description="List every report request, newest first, optionally filtered by status.",
)
async def list_reports(
    admin: ModeratorDep,
    report_status: Optional[ReportStatus] = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_session),
) -> List[ReportRead]:
    stmt = select(Report)
    if report_status:
        stmt = stmt.where(Report.status == report_status.value)
    stmt = stmt.order_by(col(Report.created_at).desc())
    result = await session.execute(stmt)
    return [ReportRead.model_validate(r) for r in result.scalars().all()]


@router.patch(
    "/{report_id}",
    response_model=ReportRead,
    summary="Update Report",
    description="Change a report's status and attach the delivered file.",
    responses={404: {"description": "Report not found"}},
)
async def update_report(
    report_id: str,
    payload: AdminReportUpdate,
    admin: ModeratorDep,
    session: AsyncSession = Depends(get_session),
) -> ReportRead:
    report = await session.get(Report, report_id)
    if report is None:
        raise NotFoundError("Report")

    report.status = payload.status.value
    if payload.file_url is not None:
        report.file_url = payload.file_url
    session.add(report)
    await session.commit()
    await session.refresh(report)

    log_business_event("report.updated", report_id=report.id, status=report.status, admin_id=admin.id)
    return ReportRead.model_validate(report)
