"""
Evaluation Endpoints.

An assigned expert saves a draft evaluation of a project and submits it
when done. Submitted evaluations are immutable and wait for admin review;
a rejected evaluation can be revised and submitted again.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.projects import ProjectEvaluation
from diligence_labs.core.database.repositories import ProjectRepository
from diligence_labs.core.errors import AuthorizationError, NotFoundError, ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import AssignmentStatus, EvaluationStatus
from diligence_labs.core.models.io.evaluations import EvaluationRead, EvaluationSaveResponse, EvaluationSubmit
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.deps import VerifiedExpertDep

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=EvaluationSaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save or Submit Evaluation",
    description="Save a draft evaluation, or submit it with `submit=true`. Submitted evaluations cannot change.",
    responses={
        200: {"description": "Draft updated"},
        400: {"description": "Evaluation already submitted, or submitted without an overall score and recommendation"},
        403: {"description": "Not assigned to this project"},
        404: {"description": "Project not found"},
    },
)
async def save_evaluation(
    payload: EvaluationSubmit,
    expert: VerifiedExpertDep,
    response: Response,
    session: AsyncSession = Depends(get_session),
) -> EvaluationSaveResponse:
    """
    Save or submit the caller's evaluation of a project.

    Submitting stamps ``submitted_at`` and completes the caller's
    assignment on the project.
    """
    _, profile = expert
    repo = ProjectRepository(session)

    if await repo.get_by_id(payload.project_id) is None:
        raise NotFoundError("Project")
    assignment = await repo.get_assignment(payload.project_id, profile.id)
    if assignment is None:
        raise AuthorizationError("Not assigned to this project")

    evaluation = await repo.get_evaluation(payload.project_id, profile.id)
    created = evaluation is None
    if created:
        evaluation = ProjectEvaluation(
            project_id=payload.project_id,
            expert_id=profile.id,
            assignment_id=assignment.id,
        )
    elif evaluation.status not in (EvaluationStatus.DRAFT.value, EvaluationStatus.REJECTED.value):
        raise ValidationError("Evaluation has already been submitted")

    # Only fields sent in this request overwrite the stored draft
    fields = payload.model_dump(exclude_unset=True, exclude={"project_id", "submit", "recommendation"})
    if "recommendation" in payload.model_fields_set:
        fields["recommendation"] = payload.recommendation.value if payload.recommendation else None
    if payload.submit:
        merged = {name: fields.get(name, getattr(evaluation, name)) for name in ("overall_score", "recommendation")}
        if merged["overall_score"] is None or merged["recommendation"] is None:
            raise ValidationError("An overall score and a recommendation are required to submit")

    for key, value in fields.items():
        setattr(evaluation, key, value)

    if payload.submit:
        now = utc_now()
        evaluation.status = EvaluationStatus.SUBMITTED.value
        evaluation.submitted_at = now
        assignment.status = AssignmentStatus.COMPLETED.value
        assignment.completed_at = now
        session.add(assignment)
    else:
        evaluation.status = EvaluationStatus.DRAFT.value

    session.add(evaluation)
    await session.commit()
    await session.refresh(evaluation)

    if not created:
        response.status_code = status.HTTP_200_OK
    log_business_event(
        "evaluation.saved",
        evaluation_id=evaluation.id,
        project_id=evaluation.project_id,
        submitted=payload.submit,
    )
    message = "Evaluation submitted successfully" if payload.submit else "Evaluation draft saved"
    return EvaluationSaveResponse(message=message, evaluation=EvaluationRead.model_validate(evaluation))
