"""
Admin Staff Assignment Endpoints.

Consultation sessions and report requests are worked by admin team
members. Moderators see the queue of unstaffed work and track progress;
admins staff an item with one lead and any number of contributors.
"""

from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.admins import AdminUser, StaffAssignment
from diligence_labs.core.database.entities.consultations import ConsultationSession, Report
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.errors import ConflictError, NotFoundError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import (
    AssignmentStatus,
    ReportStatus,
    SessionStatus,
    StaffRole,
    WorkItemType,
)
from diligence_labs.core.models.io.admin import (
    PendingWorkItem,
    PendingWorkResponse,
    PendingWorkStats,
    StaffAssignmentCreate,
    StaffAssignmentCreateResponse,
    StaffAssignmentList,
    StaffAssignmentRead,
    StaffAssignmentUpdate,
    StaffMember,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services import staffing
from diligence_labs.server.services.deps import AdminDep, ModeratorDep

logger = get_logger(__name__)

router = APIRouter()

WorkItem = Union[ConsultationSession, Report]

CLOSED_STATUSES = ("COMPLETED", "CANCELLED")


def _title(item: WorkItem) -> str:
    if isinstance(item, Report):
        return item.title
    return f"{item.consultation_type} Consultation"


async def _load_item(session: AsyncSession, item_type: str, item_id: str) -> Optional[WorkItem]:
    if item_type == WorkItemType.REPORT.value:
        return await session.get(Report, item_id)
    return await session.get(ConsultationSession, item_id)


async def _to_read(session: AsyncSession, assignment: StaffAssignment) -> StaffAssignmentRead:
    item = await _load_item(session, assignment.item_type, assignment.item_id)
    assignee = await session.get(AdminUser, assignment.assignee_id)
    return StaffAssignmentRead(
        **assignment.model_dump(exclude={"assignee_id", "assigned_by", "updated_at"}),
        item_title=_title(item) if item is not None else None,
        assignee=StaffMember.model_validate(assignee) if assignee is not None else None,
    )


@router.get(
    "",
    response_model=StaffAssignmentList,
    summary="List Staff Assignments",
    description="Every session and report assignment, newest first.",
)
async def list_assignments(admin: ModeratorDep, session: AsyncSession = Depends(get_session)) -> StaffAssignmentList:
    stmt = select(StaffAssignment).order_by(col(StaffAssignment.created_at).desc())
    assignments = (await session.execute(stmt)).scalars().all()
    return StaffAssignmentList(assignments=[await _to_read(session, a) for a in assignments])


@router.get(
    "/pending",
    response_model=PendingWorkResponse,
    summary="Pending Work",
    description="Sessions and reports still waiting for staff, oldest first, with staffing suggestions.",
)
async def pending_work(admin: ModeratorDep, session: AsyncSession = Depends(get_session)) -> PendingWorkResponse:
    """
    The staffing queue.

    An item is pending while it is PENDING, or while it is still open
    and nobody has been assigned to it.
    """
    staffed: Dict[str, set] = {WorkItemType.SESSION.value: set(), WorkItemType.REPORT.value: set()}
    rows = (await session.execute(select(StaffAssignment.item_type, StaffAssignment.item_id))).all()
    for item_type, item_id in rows:
        staffed.setdefault(item_type, set()).add(item_id)

    sessions = (
        await session.execute(
            select(ConsultationSession, User)
            .outerjoin(User, User.id == ConsultationSession.user_id)
            .where(col(ConsultationSession.status).not_in(CLOSED_STATUSES))
        )
    ).all()
    reports = (
        await session.execute(
            select(Report, User)
            .outerjoin(User, User.id == Report.user_id)
            .where(col(Report.status).not_in(CLOSED_STATUSES))
        )
    ).all()

    items: List[PendingWorkItem] = []
    for item_type, rows in ((WorkItemType.SESSION.value, sessions), (WorkItemType.REPORT.value, reports)):
        for item, user in rows:
            has_assignments = item.id in staffed[item_type]
            if item.status != "PENDING" and has_assignments:
                continue
            kind = item.type if isinstance(item, Report) else item.consultation_type
            suggestion = staffing.suggest_staffing(item_type, kind)
            requester = user.email if user is not None else getattr(item, "guest_email", None)
            items.append(
                PendingWorkItem(
                    id=item.id,
                    type=item_type,
                    title=_title(item),
                    kind=kind,
                    description=item.description,
                    status=item.status,
                    requested_by=requester,
                    created_at=item.created_at,
                    has_assignments=has_assignments,
                    suggested_team_size=suggestion.team_size,
                    suggested_hours=suggestion.hours,
                )
            )
    items.sort(key=lambda i: i.created_at)

    return PendingWorkResponse(
        items=items,
        stats=PendingWorkStats(
            total_pending=len(items),
            unassigned_items=sum(1 for i in items if not i.has_assignments),
        ),
    )


@router.post(
    "",
    response_model=StaffAssignmentCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign Staff",
    description="Assign team members to a session or report. The first assignee takes the requested role.",
    responses={
        404: {"description": "Item or team member not found"},
        409: {"description": "Team member already assigned to the item"},
    },
)
async def assign_staff(
    payload: StaffAssignmentCreate,
    admin: AdminDep,
    session: AsyncSession = Depends(get_session),
) -> StaffAssignmentCreateResponse:
    """
    Staff a work item.

    Later assignees join as contributors. A pending report moves to
    IN_PROGRESS and a pending session to SCHEDULED.
    """
    item_type = payload.item_type.value
    item = await _load_item(session, item_type, payload.item_id)
    if item is None:
        raise NotFoundError("Report" if item_type == WorkItemType.REPORT.value else "Session")

    existing = set(
        (
            await session.execute(
                select(StaffAssignment.assignee_id).where(
                    (StaffAssignment.item_type == item_type) & (StaffAssignment.item_id == item.id)
                )
            )
        )
        .scalars()
        .all()
    )

    assignees: List[AdminUser] = []
    for assignee_id in dict.fromkeys(payload.assignee_ids):
        assignee = await session.get(AdminUser, assignee_id)
        if assignee is None or not assignee.is_active:
            raise NotFoundError("Team member")
        if assignee_id in existing:
            raise ConflictError(f"{assignee.name} is already assigned to this {item_type}")
        assignees.append(assignee)

    created: List[StaffAssignment] = []
    for position, assignee in enumerate(assignees):
        assignment = StaffAssignment(
            item_type=item_type,
            item_id=item.id,
            assignee_id=assignee.id,
            assigned_by=admin.id,
            role=payload.role.value if position == 0 else StaffRole.CONTRIBUTOR.value,
            estimated_hours=payload.estimated_hours,
        )
        session.add(assignment)
        created.append(assignment)

    if isinstance(item, Report) and item.status == ReportStatus.PENDING.value:
        item.status = ReportStatus.IN_PROGRESS.value
        session.add(item)
    elif isinstance(item, ConsultationSession) and item.status == SessionStatus.PENDING.value:
        item.status = SessionStatus.SCHEDULED.value
        session.add(item)

    await session.commit()
    for assignment in created:
        await session.refresh(assignment)

    log_business_event(
        "staff.assigned", item_type=item_type, item_id=item.id, assignees=len(created), assigned_by=admin.id
    )
    return StaffAssignmentCreateResponse(
        message="Assignments created successfully",
        assignments=[await _to_read(session, a) for a in created],
    )


@router.patch(
    "/{assignment_id}",
    response_model=StaffAssignmentRead,
    summary="Update Staff Assignment",
    description="Record progress on an assignment. Starting and completing it stamp the matching time.",
    responses={404: {"description": "Assignment not found"}},
)
async def update_assignment(
    assignment_id: str,
    payload: StaffAssignmentUpdate,
    admin: ModeratorDep,
    session: AsyncSession = Depends(get_session),
) -> StaffAssignmentRead:
    assignment = await session.get(StaffAssignment, assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment")

    if payload.status is not None:
        assignment.status = payload.status.value
        if payload.status == AssignmentStatus.IN_PROGRESS and assignment.started_at is None:
            assignment.started_at = utc_now()
        elif payload.status == AssignmentStatus.COMPLETED and assignment.completed_at is None:
            assignment.completed_at = utc_now()
    if "actual_hours" in payload.model_fields_set:
        assignment.actual_hours = payload.actual_hours
    if payload.notes is not None:
        assignment.notes = payload.notes

    session.add(assignment)
    await session.commit()
    await session.refresh(assignment)

    log_business_event("staff.assignment_updated", assignment_id=assignment.id, status=assignment.status)
    return await _to_read(session, assignment)
