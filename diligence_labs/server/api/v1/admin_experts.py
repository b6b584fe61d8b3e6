"""
Admin Expert Application Endpoints.

Moderators list expert applications; admins approve, reject or ask for
more information, one application at a time or in bulk.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session
from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.errors import DiligenceError, ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import ExpertVerificationStatus
from diligence_labs.core.models.io.experts import (
    ApplicationReviewRequest,
    ApplicationReviewResponse,
    BulkApplicationReviewRequest,
    BulkApplicationReviewResponse,
    BulkReviewResult,
    BulkReviewSummary,
    ExpertApplicationRead,
    ExpertProfileRead,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.deps import AdminDep, EmailSenderDep, ModeratorDep
from diligence_labs.server.services.expert_reviews import ReviewOutcome, apply_review, notify_applicant

logger = get_logger(__name__)

router = APIRouter()

ACTION_MESSAGES = {
    "APPROVE": "Expert application approved",
    "REJECT": "Expert application rejected",
    "REQUEST_INFO": "Additional information requested from applicant",
}


@router.get(
    "",
    response_model=List[ExpertApplicationRead],
    summary="List Expert Applications",
    description="List expert applications by status (PENDING by default, `ALL` for every status), oldest first.",
)
async def list_applications(
    admin: ModeratorDep,
    application_status: str = Query(default=ExpertVerificationStatus.PENDING.value, alias="status"),
    session: AsyncSession = Depends(get_session),
) -> List[ExpertApplicationRead]:
    stmt = select(ExpertProfile, User).join(User, User.id == ExpertProfile.user_id)
    if application_status != "ALL":
        try:
            wanted = ExpertVerificationStatus(application_status)
        except ValueError as e:
            raise ValidationError(f"Invalid application status: {application_status}") from e
        stmt = stmt.where(ExpertProfile.verification_status == wanted.value)
    stmt = stmt.order_by(col(ExpertProfile.created_at))

    rows = (await session.execute(stmt)).all()
    return [
        ExpertApplicationRead(
            **ExpertProfileRead.from_entity(profile).model_dump(),
            user_name=user.name,
            user_email=user.email,
        )
        for profile, user in rows
    ]


@router.post(
    "",
    response_model=ApplicationReviewResponse,
    summary="Review Expert Application",
    description="Approve, reject or request more information on one application.",
    responses={404: {"description": "Expert profile not found"}},
)
async def review_application(
    payload: ApplicationReviewRequest,
    admin: AdminDep,
    sender: EmailSenderDep,
    session: AsyncSession = Depends(get_session),
) -> ApplicationReviewResponse:
    outcome = await apply_review(session, admin.id, payload.expert_id, payload.action, payload.review_notes)
    await session.commit()
    email_sent = await notify_applicant(sender, outcome)

    log_business_event(
        "expert.application_reviewed",
        expert_id=payload.expert_id,
        decision=payload.action.value,
        admin_id=admin.id,
    )
    return ApplicationReviewResponse(
        message=ACTION_MESSAGES[payload.action.value],
        expert_id=payload.expert_id,
        action=payload.action,
        new_status=outcome.new_status,
        email_sent=email_sent,
    )


@router.put(
    "",
    response_model=BulkApplicationReviewResponse,
    summary="Bulk Review Expert Applications",
    description="Apply one decision to several applications; each reports its own result.",
)
async def bulk_review_applications(
    payload: BulkApplicationReviewRequest,
    admin: AdminDep,
    sender: EmailSenderDep,
    session: AsyncSession = Depends(get_session),
) -> BulkApplicationReviewResponse:
    outcomes: List[ReviewOutcome] = []
    results: List[BulkReviewResult] = []
    for expert_id in payload.expert_ids:
        try:
            outcome = await apply_review(session, admin.id, expert_id, payload.action, payload.review_notes)
        except DiligenceError as e:
            results.append(BulkReviewResult(expert_id=expert_id, status="ERROR", error=e.message))
            continue
        outcomes.append(outcome)
        results.append(BulkReviewResult(expert_id=expert_id, status="SUCCESS", new_status=outcome.new_status))
    await session.commit()

    for outcome in outcomes:
        sent = await notify_applicant(sender, outcome)
        for result in results:
            if result.expert_id == outcome.profile.id:
                result.email_sent = sent

    successful = len(outcomes)
    log_business_event(
        "expert.applications_bulk_reviewed",
        decision=payload.action.value,
        successful=successful,
        failed=len(results) - successful,
        admin_id=admin.id,
    )
    return BulkApplicationReviewResponse(
        message=f"Processed {len(results)} applications",
        results=results,
        summary=BulkReviewSummary(total=len(results), successful=successful, failed=len(results) - successful),
    )
