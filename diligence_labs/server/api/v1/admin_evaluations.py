"""
Admin Evaluation Review Endpoints.

Moderators browse submitted evaluations; admins approve or reject them.
Approved evaluations feed the project's overall score, and a project is
complete once every assigned expert has an approved evaluation.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.entities.projects import ProjectEvaluation
from diligence_labs.core.database.repositories import ProjectRepository, pagination
from diligence_labs.core.errors import NotFoundError, ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import AssignmentStatus, EvaluationStatus, ProjectStatus
from diligence_labs.core.models.io.evaluations import (
    EvaluationListResponse,
    EvaluationRead,
    EvaluationReviewRequest,
    EvaluationReviewResponse,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.deps import AdminDep, ModeratorDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=EvaluationListResponse,
    summary="List Evaluations",
    description="List evaluations, newest first, by project and status.",
)
async def list_evaluations(
    admin: ModeratorDep,
    project_id: Optional[str] = Query(default=None, alias="projectId"),
    evaluation_status: Optional[EvaluationStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> EvaluationListResponse:
    conditions = []
    if project_id:
        conditions.append(ProjectEvaluation.project_id == project_id)
    if evaluation_status:
        conditions.append(ProjectEvaluation.status == evaluation_status.value)

    stmt = (
        select(ProjectEvaluation)
        .where(*conditions)
        .order_by(col(ProjectEvaluation.created_at).desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    count_stmt = select(func.count()).select_from(ProjectEvaluation).where(*conditions)
    evaluations = (await session.execute(stmt)).scalars().all()
    total = int((await session.execute(count_stmt)).scalar_one())
    return EvaluationListResponse(
        evaluations=[EvaluationRead.model_validate(e) for e in evaluations],
        pagination=pagination(page, limit, total),
    )


@router.post(
    "/{evaluation_id}/review",
    response_model=EvaluationReviewResponse,
    summary="Review Evaluation",
    description="Approve or reject a submitted evaluation.",
    responses={400: {"description": "Evaluation is not awaiting review"}, 404: {"description": "Not found"}},
)
async def review_evaluation(
    evaluation_id: str,
    payload: EvaluationReviewRequest,
    admin: AdminDep,
    session: AsyncSession = Depends(get_session),
) -> EvaluationReviewResponse:
    """
    Review an evaluation.

    On approval the project's overall score becomes the mean of its
    approved overall scores and the expert's evaluation count goes up.
    A rejected evaluation goes back to its expert: ``submitted_at`` is
    cleared and the assignment reopens so a revision can be submitted.
    """
    evaluation = await session.get(ProjectEvaluation, evaluation_id)
    if evaluation is None:
        raise NotFoundError("Evaluation")
    if evaluation.status != EvaluationStatus.SUBMITTED.value:
        raise ValidationError("Only submitted evaluations can be reviewed")

    repo = ProjectRepository(session)
    project = await repo.get_by_id(evaluation.project_id)
    if project is None:
        raise NotFoundError("Project")

    evaluation.status = payload.decision
    evaluation.reviewed_at = utc_now()
    evaluation.reviewed_by = admin.id
    session.add(evaluation)

    if payload.decision == EvaluationStatus.APPROVED.value:
        profile = await session.get(ExpertProfile, evaluation.expert_id)
        if profile is not None:
            profile.total_evaluations += 1
            session.add(profile)
        await session.flush()

        approved = await repo.list_evaluations(project.id, [EvaluationStatus.APPROVED.value])
        scores = [e.overall_score for e in approved if e.overall_score is not None]
        if scores:
            project.overall_score = round(sum(scores) / len(scores), 2)

        assignments = await repo.list_assignments(project.id)
        approved_experts = {e.expert_id for e in approved}
        if assignments and all(a.expert_id in approved_experts for a in assignments):
            project.status = ProjectStatus.EVALUATION_COMPLETE.value
        session.add(project)
    else:
        # Hand the evaluation back to the expert for revision
        evaluation.submitted_at = None
        assignment = await repo.get_assignment(project.id, evaluation.expert_id)
        if assignment is not None:
            assignment.status = AssignmentStatus.IN_PROGRESS.value
            assignment.completed_at = None
            session.add(assignment)

    await session.commit()
    await session.refresh(evaluation)
    await session.refresh(project)

    log_business_event(
        "evaluation.reviewed",
        evaluation_id=evaluation.id,
        decision=payload.decision,
        project_status=project.status,
    )
    return EvaluationReviewResponse(
        message=f"Evaluation {payload.decision.lower()}",
        evaluation=EvaluationRead.model_validate(evaluation),
        project_status=project.status,
        project_overall_score=project.overall_score,
    )
