"""
Project Submission Endpoints.

Users submit blockchain projects for expert evaluation, within a monthly
submission allowance, and earn submitter reputation for each submission.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session, to_naive_utc, utc_now
from diligence_labs.core.database.entities.projects import Project
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.database.repositories import ProjectRepository, UserRepository, pagination
from diligence_labs.core.errors import AuthenticationError, RateLimitError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import ProjectStatus
from diligence_labs.core.models.io.projects import (
    MonthlyUsage,
    ProjectCreate,
    ProjectCreateResponse,
    ProjectListItem,
    ProjectListResponse,
    ProjectRead,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.deps import CurrentUserDep, OptionalUserDep
from diligence_labs.server.services.matching import submission_reputation

logger = get_logger(__name__)

router = APIRouter()


def reset_monthly_usage(user: User, now: datetime) -> bool:
    """Zero the monthly counter when the calendar month rolled over."""
    last = user.last_reset_date
    if last is not None and (last.year, last.month) == (now.year, now.month):
        return False
    user.monthly_projects_used = 0
    user.last_reset_date = now
    return True


@router.post(
    "",
    response_model=ProjectCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Project",
    description="Submit a project for expert evaluation. Counts against the monthly submission limit.",
    responses={
        400: {"description": "Missing required fields"},
        401: {"description": "Not authenticated"},
        429: {"description": "Monthly project submission limit exceeded"},
    },
)
async def submit_project(
    payload: ProjectCreate,
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_session),
) -> ProjectCreateResponse:
    """
    Submit a project.

    The submitter earns ``floor(25 x tier multiplier)`` reputation points;
    the monthly counter resets on the first submission of a new month.
    """
    if reset_monthly_usage(user, utc_now()):
        session.add(user)

    if user.monthly_projects_used >= user.monthly_project_limit:
        await session.commit()
        raise RateLimitError(
            "Monthly project submission limit exceeded",
            details={
                "currentUsage": user.monthly_projects_used,
                "limit": user.monthly_project_limit,
                "tier": user.submitter_tier,
                "upgradeRequired": True,
            },
        )

    project = Project(
        **payload.model_dump(exclude={"technology_stack", "priority_level", "evaluation_deadline"}),
        evaluation_deadline=to_naive_utc(payload.evaluation_deadline),
        priority_level=payload.priority_level.value,
        submitter_id=user.id,
        status=ProjectStatus.SUBMITTED.value,
    )
    project.set_technology_stack_list(payload.technology_stack)
    await ProjectRepository(session).create(project)

    user.monthly_projects_used += 1
    user.total_projects_submitted += 1
    points = submission_reputation(user.submitter_tier)
    await UserRepository(session).add_submission_reputation(user, points)

    await session.commit()
    await session.refresh(project)
    await session.refresh(user)

    log_business_event("project.submitted", project_id=project.id, submitter_id=user.id, reputation_awarded=points)
    return ProjectCreateResponse(
        message="Project submitted successfully",
        project=ProjectRead.from_entity(project),
        reputation_awarded=points,
        monthly_usage=MonthlyUsage(
            used=user.monthly_projects_used,
            limit=user.monthly_project_limit,
            remaining=max(0, user.monthly_project_limit - user.monthly_projects_used),
        ),
    )


@router.get(
    "",
    response_model=ProjectListResponse,
    summary="List Projects",
    description="List submitted projects, newest first. `userOnly=true` restricts to the caller's own submissions.",
    responses={401: {"description": "userOnly requires authentication"}},
)
async def list_projects(
    user: OptionalUserDep,
    project_status: Optional[ProjectStatus] = Query(default=None, alias="status"),
    category: Optional[str] = None,
    user_only: bool = Query(default=False, alias="userOnly"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> ProjectListResponse:
    if user_only and user is None:
        raise AuthenticationError()

    repo = ProjectRepository(session)
    projects, total = await repo.list_projects(
        statuses=[project_status.value] if project_status else None,
        category=category,
        submitter_id=user.id if user_only else None,
        limit=limit,
        offset=(page - 1) * limit,
    )
    ids = [p.id for p in projects]
    evaluation_counts = await repo.submitted_evaluation_counts(ids)
    assignment_counts = await repo.assignment_counts(ids)

    items = [
        ProjectListItem(
            **ProjectRead.from_entity(p).model_dump(),
            evaluation_count=evaluation_counts.get(p.id, 0),
            assignment_count=assignment_counts.get(p.id, 0),
        )
        for p in projects
    ]
    return ProjectListResponse(projects=items, pagination=pagination(page, limit, total))
