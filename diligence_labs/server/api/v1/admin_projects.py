"""Admin project workflow endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session
from diligence_labs.core.database.repositories import ProjectRepository
from diligence_labs.core.errors import NotFoundError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.io.projects import ProjectRead, ProjectStatusUpdate
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.activity import record_activity
from diligence_labs.server.services.deps import ModeratorDep

logger = get_logger(__name__)

router = APIRouter()


@router.patch(
    "/{project_id}/status",
    response_model=ProjectRead,
    summary="Update Project Status",
    description="Move a project through the evaluation workflow, e.g. open it for expert assignment.",
    responses={404: {"description": "Project not found"}},
)
async def update_project_status(
    project_id: str,
    payload: ProjectStatusUpdate,
    admin: ModeratorDep,
    session: AsyncSession = Depends(get_session),
) -> ProjectRead:
    repo = ProjectRepository(session)
    project = await repo.get_by_id(project_id)
    if project is None:
        raise NotFoundError("Project")

    previous = project.status
    project.status = payload.status.value
    await repo.update(project)
    record_activity(
        session,
        "PROJECT_STATUS_CHANGED",
        admin_id=admin.id,
        project_id=project.id,
        previous_status=previous,
        new_status=project.status,
    )
    await session.commit()
    await session.refresh(project)

    log_business_event("project.status_changed", project_id=project.id, new_status=project.status)
    return ProjectRead.from_entity(project)
