"""
Expert Assignment Endpoints.

Verified experts browse projects open for evaluation, take or release a
slot on a project (at most three experts per project), and follow their
own assignments.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.projects import ProjectAssignment
from diligence_labs.core.database.repositories import ProjectRepository, pagination
from diligence_labs.core.errors import NotFoundError, ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import AssignmentStatus, ProjectStatus
from diligence_labs.core.models.io.evaluations import EvaluationRead
from diligence_labs.core.models.io.projects import (
    AssignmentRead,
    AssignProjectRequest,
    AssignProjectResponse,
    AvailableProject,
    AvailableProjectsResponse,
    ExpertSummary,
    MyAssignment,
    MyAssignmentsResponse,
    OtherExpert,
    ProjectProgress,
    ProjectRead,
    UnassignProjectResponse,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services import matching
from diligence_labs.server.services.activity import record_activity
from diligence_labs.server.services.deps import VerifiedExpertDep

logger = get_logger(__name__)

router = APIRouter()

ASSIGNABLE_STATUSES = (ProjectStatus.EXPERT_ASSIGNMENT.value, ProjectStatus.EVALUATION_IN_PROGRESS.value)


def _available_statuses(value: str) -> list:
    if value == "ALL":
        return list(ASSIGNABLE_STATUSES)
    try:
        return [ProjectStatus(value).value]
    except ValueError as e:
        raise ValidationError(f"Invalid project status: {value}") from e


@router.get(
    "/available-projects",
    response_model=AvailableProjectsResponse,
    summary="Available Projects",
    description="Projects open for evaluation, urgent first, with slot, progress and fit information.",
    responses={403: {"description": "Verified expert profile required"}},
)
async def available_projects(
    expert: VerifiedExpertDep,
    project_status: str = Query(default=ProjectStatus.EXPERT_ASSIGNMENT.value, alias="status"),
    category: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> AvailableProjectsResponse:
    """
    List projects an expert could pick up.

    ``status=ALL`` covers both assignable statuses. Each project reports
    whether the caller is already on it, whether they have submitted an
    evaluation, the free slots, the evaluation progress, and how well it
    fits the caller's tier and expertise.
    """
    _, profile = expert
    repo = ProjectRepository(session)
    projects, total = await repo.list_projects(
        statuses=_available_statuses(project_status),
        category=category,
        limit=limit,
        offset=(page - 1) * limit,
        by_priority=True,
    )
    ids = [p.id for p in projects]
    assignment_counts = await repo.assignment_counts(ids)
    submitted_counts = await repo.submitted_evaluation_counts(ids)
    assigned = await repo.assigned_project_ids(profile.id)
    evaluated = await repo.submitted_project_ids(profile.id)

    items = []
    for project in projects:
        count = assignment_counts.get(project.id, 0)
        items.append(
            AvailableProject(
                **ProjectRead.from_entity(project).model_dump(),
                is_assigned=project.id in assigned,
                has_evaluated=project.id in evaluated,
                assignment_count=count,
                available_slots=matching.available_slots(count),
                evaluation_progress=matching.evaluation_progress(submitted_counts.get(project.id, 0), count),
                tier_compatible=matching.is_tier_compatible(
                    profile.expert_tier, project.evaluation_budget, project.priority_level
                ),
                expertise_match_score=matching.match_project(profile, project),
            )
        )

    return AvailableProjectsResponse(
        projects=items,
        pagination=pagination(page, limit, total),
        expert=ExpertSummary(
            id=profile.id,
            tier=profile.expert_tier,
            verification_status=profile.verification_status,
            reputation_points=profile.reputation_points,
        ),
    )


@router.post(
    "/assign-project",
    response_model=AssignProjectResponse,
    summary="Assign Project",
    description="Take a slot on a project that is open for evaluation.",
    responses={
        400: {"description": "Project not assignable, already assigned, full, or assignment limit reached"},
        403: {"description": "Verified expert profile required"},
        404: {"description": "Project not found"},
    },
)
async def assign_project(
    payload: AssignProjectRequest,
    expert: VerifiedExpertDep,
    session: AsyncSession = Depends(get_session),
) -> AssignProjectResponse:
    """
    Assign the caller to a project.

    The first assignment moves an EXPERT_ASSIGNMENT project to
    EVALUATION_IN_PROGRESS. The expert and their user account earn 25
    reputation for a PRIMARY assignment, 15 otherwise.
    """
    user, profile = expert
    repo = ProjectRepository(session)

    project = await repo.get_by_id(payload.project_id)
    if project is None:
        raise NotFoundError("Project")
    if project.status not in ASSIGNABLE_STATUSES:
        raise ValidationError("Project is not available for assignment")
    if await repo.get_assignment(project.id, profile.id) is not None:
        raise ValidationError("Already assigned to this project")
    if await repo.count_assignments(project.id) >= matching.MAX_EXPERTS_PER_PROJECT:
        raise ValidationError("Project already has the maximum number of experts assigned")

    limit = matching.active_assignment_limit(profile.expert_tier)
    if await repo.count_active_assignments(profile.id) >= limit:
        raise ValidationError(
            "Maximum active assignments reached for your tier",
            details={"limit": limit, "tier": profile.expert_tier},
        )

    now = utc_now()
    assignment = ProjectAssignment(
        project_id=project.id,
        expert_id=profile.id,
        assignment_type=payload.assignment_type.value,
        status=AssignmentStatus.ASSIGNED.value,
        estimated_hours=payload.estimated_hours,
        specialization=payload.specialization,
        assigned_at=now,
        accepted_at=now,
    )
    session.add(assignment)

    if project.status == ProjectStatus.EXPERT_ASSIGNMENT.value:
        project.status = ProjectStatus.EVALUATION_IN_PROGRESS.value
        session.add(project)

    points = matching.assignment_reputation(assignment.assignment_type)
    profile.reputation_points += points
    user.reputation_points += points
    session.add(profile)
    session.add(user)

    record_activity(
        session,
        "PROJECT_ASSIGNED",
        user_id=user.id,
        project_id=project.id,
        expert_id=profile.id,
        assignment_type=assignment.assignment_type,
    )
    await session.commit()
    await session.refresh(assignment)

    log_business_event("expert.project_assigned", project_id=project.id, expert_id=profile.id)
    return AssignProjectResponse(
        message="Successfully assigned to project",
        assignment=AssignmentRead.model_validate(assignment),
        reputation_awarded=points,
    )


@router.delete(
    "/assign-project",
    response_model=UnassignProjectResponse,
    summary="Unassign Project",
    description="Release the caller's slot on a project they have not yet evaluated.",
    responses={
        400: {"description": "Evaluation already submitted"},
        403: {"description": "Verified expert profile required"},
        404: {"description": "Assignment not found"},
    },
)
async def unassign_project(
    expert: VerifiedExpertDep,
    project_id: str = Query(alias="projectId", min_length=1),
    session: AsyncSession = Depends(get_session),
) -> UnassignProjectResponse:
    user, profile = expert
    repo = ProjectRepository(session)

    assignment = await repo.get_assignment(project_id, profile.id)
    if assignment is None:
        raise NotFoundError("Assignment")

    evaluation = await repo.get_evaluation(project_id, profile.id)
    if evaluation is not None and evaluation.submitted_at is not None:
        raise ValidationError("Cannot unassign after submitting an evaluation")

    if evaluation is not None:
        await session.delete(evaluation)
    await session.delete(assignment)
    await session.flush()

    remaining = await repo.count_assignments(project_id)
    if remaining == 0:
        project = await repo.get_by_id(project_id)
        if project is not None:
            project.status = ProjectStatus.PENDING_EVALUATION.value
            session.add(project)

    record_activity(session, "PROJECT_UNASSIGNED", user_id=user.id, project_id=project_id, expert_id=profile.id)
    await session.commit()

    log_business_event("expert.project_unassigned", project_id=project_id, expert_id=profile.id)
    return UnassignProjectResponse(message="Successfully unassigned from project", remaining_assignments=remaining)


@router.get(
    "/my-assignments",
    response_model=MyAssignmentsResponse,
    summary="My Assignments",
    description="The caller's assignments with evaluation state, co-assigned experts and project progress.",
    responses={403: {"description": "Verified expert profile required"}},
)
async def my_assignments(
    expert: VerifiedExpertDep,
    assignment_status: Optional[AssignmentStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> MyAssignmentsResponse:
    _, profile = expert
    repo = ProjectRepository(session)
    rows, total = await repo.list_expert_assignments(
        profile.id, assignment_status.value if assignment_status else None, limit, (page - 1) * limit
    )
    submitted_counts = await repo.submitted_evaluation_counts([project.id for _, project in rows])
    now = utc_now()

    items = []
    for assignment, project in rows:
        evaluation = await repo.get_evaluation(project.id, profile.id)
        if evaluation is None:
            evaluation_status = "NOT_STARTED"
        elif evaluation.submitted_at is not None:
            evaluation_status = "COMPLETED"
        else:
            evaluation_status = "DRAFT"

        team = await repo.list_assignment_experts(project.id)
        others = [
            OtherExpert(
                expert_id=other_profile.id,
                name=other_user.name,
                expert_tier=other_profile.expert_tier,
                assignment_type=other.assignment_type,
            )
            for other, other_profile, other_user in team
            if other_profile.id != profile.id
        ]
        submitted = submitted_counts.get(project.id, 0)
        started = assignment.accepted_at or assignment.assigned_at

        items.append(
            MyAssignment(
                **AssignmentRead.model_validate(assignment).model_dump(),
                project=ProjectRead.from_entity(project),
                evaluation=EvaluationRead.model_validate(evaluation) if evaluation else None,
                has_evaluated=evaluation_status == "COMPLETED",
                evaluation_status=evaluation_status,
                days_on_project=max(0, (now - started).days),
                other_experts=others,
                project_progress=ProjectProgress(
                    total_experts=len(team),
                    submitted_evaluations=submitted,
                    percent_complete=matching.evaluation_progress(submitted, len(team)),
                ),
            )
        )

    counts = await repo.assignment_status_counts(profile.id)
    stats = {s.value: counts.get(s.value, 0) for s in AssignmentStatus}
    stats["total"] = sum(counts.values())
    return MyAssignmentsResponse(assignments=items, pagination=pagination(page, limit, total), stats=stats)
