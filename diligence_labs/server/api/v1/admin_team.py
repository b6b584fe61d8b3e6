"""
Admin Team Endpoints.

The back-office team is the set of admin accounts. Admins browse the team
with its workload; super admins add members with any role, change roles
and deactivate accounts.
"""

from typing import Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session
from diligence_labs.core.database.entities.admins import AdminUser, StaffAssignment
from diligence_labs.core.errors import NotFoundError, ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import AdminRole
from diligence_labs.core.models.io.admin import (
    AdminRead,
    TeamMemberCreate,
    TeamMemberRead,
    TeamMemberResponse,
    TeamMemberUpdate,
    TeamResponse,
    TeamStats,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.core.security import check_password_strength, hash_password
from diligence_labs.server.api.v1.admin_auth import get_admin_by_email
from diligence_labs.server.api.v1.auth import ensure_strong_password
from diligence_labs.server.services import staffing
from diligence_labs.server.services.deps import AdminDep, SuperAdminDep

logger = get_logger(__name__)

router = APIRouter()


async def _open_workload(session: AsyncSession) -> Dict[str, Tuple[int, int]]:
    """Open assignment count and estimated hours per assignee."""
    stmt = (
        select(
            StaffAssignment.assignee_id,
            func.count(),
            func.coalesce(func.sum(StaffAssignment.estimated_hours), 0),
        )
        .where(col(StaffAssignment.status).in_(staffing.OPEN_STATUSES))
        .group_by(StaffAssignment.assignee_id)
    )
    rows = (await session.execute(stmt)).all()
    return {assignee_id: (int(count), int(hours)) for assignee_id, count, hours in rows}


@router.get(
    "",
    response_model=TeamResponse,
    summary="List Team",
    description="List admin team members with their open assignments, plus team statistics.",
)
async def list_team(
    admin: AdminDep,
    search: Optional[str] = Query(default=None, description="Matches name or email"),
    role: Optional[AdminRole] = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> TeamResponse:
    stmt = select(AdminUser)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(or_(func.lower(AdminUser.name).like(pattern), func.lower(AdminUser.email).like(pattern)))
    if role:
        stmt = stmt.where(AdminUser.role == role.value)
    members = (await session.execute(stmt.order_by(col(AdminUser.created_at).desc()))).scalars().all()

    workload = await _open_workload(session)
    everyone = (await session.execute(select(AdminUser))).scalars().all()
    active = [m for m in everyone if m.is_active]
    roles: Dict[str, int] = {}
    for member in everyone:
        roles[member.role] = roles.get(member.role, 0) + 1

    return TeamResponse(
        members=[
            TeamMemberRead(
                **AdminRead.model_validate(m).model_dump(),
                open_assignments=workload.get(m.id, (0, 0))[0],
                assigned_hours=workload.get(m.id, (0, 0))[1],
            )
            for m in members
        ],
        stats=TeamStats(
            total_members=len(everyone),
            active_members=len(active),
            average_workload=staffing.workload_percent(workload.get(m.id, (0, 0))[1] for m in active),
            roles=roles,
        ),
    )


@router.post(
    "",
    response_model=TeamMemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Team Member",
    description="Create an admin account with the given role.",
    responses={
        400: {"description": "Weak password or email already registered"},
        403: {"description": "SUPER_ADMIN role required"},
    },
)
async def add_member(
    payload: TeamMemberCreate,
    admin: SuperAdminDep,
    session: AsyncSession = Depends(get_session),
) -> TeamMemberResponse:
    email = payload.email.lower()
    ensure_strong_password(check_password_strength(payload.password, email))
    if await get_admin_by_email(session, email) is not None:
        raise ValidationError("Admin with this email already exists")

    member = AdminUser(
        email=email,
        name=payload.name,
        password_hash=hash_password(payload.password),
        role=payload.role.value,
    )
    session.add(member)
    await session.commit()
    await session.refresh(member)

    log_business_event("admin.team_member_added", member_id=member.id, role=member.role, added_by=admin.id)
    return TeamMemberResponse(message="Team member added successfully", member=AdminRead.model_validate(member))


@router.patch(
    "/{member_id}",
    response_model=TeamMemberResponse,
    summary="Update Team Member",
    description="Rename a team member, change their role or (de)activate their account.",
    responses={
        400: {"description": "Super admins cannot demote or deactivate themselves"},
        403: {"description": "SUPER_ADMIN role required"},
        404: {"description": "Team member not found"},
    },
)
async def update_member(
    member_id: str,
    payload: TeamMemberUpdate,
    admin: SuperAdminDep,
    session: AsyncSession = Depends(get_session),
) -> TeamMemberResponse:
    member = await session.get(AdminUser, member_id)
    if member is None:
        raise NotFoundError("Team member")

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if member.id == admin.id and (
        changes.get("role", AdminRole.SUPER_ADMIN) != AdminRole.SUPER_ADMIN or changes.get("is_active") is False
    ):
        raise ValidationError("You cannot demote or deactivate your own account")

    if "name" in changes:
        member.name = changes["name"]
    if "role" in changes:
        member.role = changes["role"].value
    if "is_active" in changes:
        member.is_active = changes["is_active"]
    session.add(member)
    await session.commit()
    await session.refresh(member)

    log_business_event(
        "admin.team_member_updated", member_id=member.id, fields=sorted(changes), updated_by=admin.id
    )
    return TeamMemberResponse(message="Team member updated", member=AdminRead.model_validate(member))
