"""
Report Request Endpoints.

Users request due diligence and advisory reports; admins later attach the
finished file and move the request through its statuses.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session
from diligence_labs.core.database.entities.consultations import Report
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import ReportStatus
from diligence_labs.core.models.io.reports import ReportCreate, ReportCreateResponse, ReportRead
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.deps import CurrentUserDep

logger = get_logger(__name__)

router = APIRouter()


def compose_report_description(data: ReportCreate) -> str:
    description = f"Project: {data.project_name}\n\n{data.description}"
    if data.project_url:
        description += f"\n\nProject URL: {data.project_url}"
    if data.deadline:
        description += f"\nPreferred Deadline: {data.deadline}"
    if data.additional_notes:
        description += f"\n\nAdditional Notes:\n{data.additional_notes}"
    description += f"\n\nPriority: {data.priority.value}"
    return description


@router.post(
    "",
    response_model=ReportCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request Report",
    description="Request a due diligence, advisory, integration or market research report.",
    responses={400: {"description": "Invalid report request"}, 401: {"description": "Not authenticated"}},
)
async def create_report(
    payload: ReportCreate,
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_session),
) -> ReportCreateResponse:
    report = Report(
        user_id=user.id,
        type=payload.type.value,
        title=payload.title,
        description=compose_report_description(payload),
        status=ReportStatus.PENDING.value,
    )
    session.add(report)
    await session.commit()
    await session.refresh(report)

    log_business_event("report.requested", report_id=report.id, user_id=user.id, report_type=report.type)
    return ReportCreateResponse(
        message="Report request submitted successfully", report=ReportRead.model_validate(report)
    )


@router.get(
    "",
    response_model=List[ReportRead],
    summary="List My Reports",
    description="List the authenticated user's report requests, newest first.",
    responses={401: {"description": "Not authenticated"}},
)
async def list_reports(user: CurrentUserDep, session: AsyncSession = Depends(get_session)) -> List[ReportRead]:
    stmt = select(Report).where(Report.user_id == user.id).order_by(col(Report.created_at).desc())
    result = await session.execute(stmt)
    return [ReportRead.model_validate(r) for r in result.scalars().all()]
