"""
Admin Consultation Endpoints.

Moderators review every booked consultation session, including guest
bookings, and move sessions through scheduling to completion.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session, to_naive_utc, utc_now
from diligence_labs.core.database.entities.consultations import ConsultationSession
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.errors import NotFoundError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import SessionStatus
from diligence_labs.core.models.io.consultations import (
    AdminSessionList,
    AdminSessionRead,
    AdminSessionUpdate,
    SessionUserSummary,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.deps import ModeratorDep

logger = get_logger(__name__)

router = APIRouter()


def _to_admin_read(booking: ConsultationSession, user: Optional[User]) -> AdminSessionRead:
    summary = SessionUserSummary(id=user.id, name=user.name, email=user.email) if user else None
    return AdminSessionRead(**AdminSessionRead.model_validate(booking).model_dump(exclude={"user"}), user=summary)


@router.get(
    "",
    response_model=AdminSessionList,
    summary="List All Sessions",
    description="List every consultation session, newest first, with the booking user's details.",
)
async def list_sessions(
    admin: ModeratorDep,
    session_status: Optional[SessionStatus] = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_session),
) -> AdminSessionList:
    stmt = select(ConsultationSession, User).outerjoin(User, User.id == ConsultationSession.user_id)
    if session_status:
        stmt = stmt.where(ConsultationSession.status == session_status.value)
    stmt = stmt.order_by(col(ConsultationSession.created_at).desc())
    rows = (await session.execute(stmt)).all()
    return AdminSessionList(sessions=[_to_admin_read(booking, user) for booking, user in rows])


@router.patch(
    "/{session_id}",
    response_model=AdminSessionRead,
    summary="Update Session",
    description="Change a session's status, notes or schedule. Completing a session stamps its completion time.",
    responses={404: {"description": "Session not found"}},
)
async def update_session(
    session_id: str,
    payload: AdminSessionUpdate,
    admin: ModeratorDep,
    session: AsyncSession = Depends(get_session),
) -> AdminSessionRead:
    booking = await session.get(ConsultationSession, session_id)
    if booking is None:
        raise NotFoundError("Session")

    booking.status = payload.status.value
    if payload.notes is not None:
        booking.notes = payload.notes
    if payload.scheduled_at is not None:
        booking.scheduled_at = to_naive_utc(payload.scheduled_at)
    if payload.status == SessionStatus.COMPLETED:
        booking.completed_at = utc_now()

    session.add(booking)
    await session.commit()
    await session.refresh(booking)

    log_business_event("consultation.updated", session_id=booking.id, status=booking.status, admin_id=admin.id)
    user = await session.get(User, booking.user_id) if booking.user_id else None
    return _to_admin_read(booking, user)
