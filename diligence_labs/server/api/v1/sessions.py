"""
Consultation Session Endpoints.

Signed-in users book consultations and list their own sessions. The
booking form's structured answers are folded into one readable session
description for the consultant.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session, to_naive_utc
from diligence_labs.core.database.entities.consultations import ConsultationSession
from diligence_labs.core.errors import ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import SessionStatus
from diligence_labs.core.models.io.consultations import (
    SERVICE_FIELD_LABELS,
    SessionCreate,
    SessionCreateResponse,
    SessionRead,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.deps import CurrentUserDep

logger = get_logger(__name__)

router = APIRouter()


def compose_session_description(data: SessionCreate) -> str:
    """Fold the booking form into the stored session description."""
    description = f"Consultation Type: {data.consultation_type}\n"
    if data.title:
        description += f"Title: {data.title}\n"
    if data.project_name:
        description += f"Project: {data.project_name}\n"
    if data.business_name:
        description += f"Business: {data.business_name}\n"

    description += f"\nDescription:\n{data.description}\n"
    description += f"\nDuration: {data.duration} minutes\n"
    description += f"Urgency: {data.urgency.value}\n"

    for field, label in SERVICE_FIELD_LABELS:
        value = getattr(data, field)
        if value:
            description += f"{label}: {value}\n"

    if data.budget:
        description += f"Budget: {data.budget}\n"
    if data.preferred_date:
        description += f"Preferred Date: {data.preferred_date}\n"
    return description


def parse_preferred_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 date or datetime into a naive UTC datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError("Invalid preferred date") from e
    return to_naive_utc(parsed)


@router.post(
    "",
    response_model=SessionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book Consultation",
    description="Book a consultation session as the authenticated user.",
    responses={400: {"description": "Invalid booking data"}, 401: {"description": "Not authenticated"}},
)
async def create_session(
    payload: SessionCreate,
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_session),
) -> SessionCreateResponse:
    """
    Book a consultation.

    The session starts PENDING; the preferred date, when given, becomes the
    tentative schedule and the contact email is kept in the notes.
    """
    booking = ConsultationSession(
        user_id=user.id,
        consultation_type=payload.consultation_type,
        description=compose_session_description(payload),
        status=SessionStatus.PENDING.value,
        scheduled_at=parse_preferred_date(payload.preferred_date),
        duration_minutes=int(payload.duration),
        notes=f"Contact Email: {payload.contact_email}",
    )
    session.add(booking)
    await session.commit()
    await session.refresh(booking)

    log_business_event(
        "consultation.booked",
        session_id=booking.id,
        user_id=user.id,
        consultation_type=booking.consultation_type,
    )
    return SessionCreateResponse(
        message="Consultation booked successfully", session=SessionRead.model_validate(booking)
    )


@router.get(
    "",
    response_model=List[SessionRead],
    summary="List My Sessions",
    description="List the authenticated user's consultation sessions, newest first.",
    responses={401: {"description": "Not authenticated"}},
)
async def list_sessions(user: CurrentUserDep, session: AsyncSession = Depends(get_session)) -> List[SessionRead]:
    stmt = (
        select(ConsultationSession)
        .where(ConsultationSession.user_id == user.id)
        .order_by(col(ConsultationSession.created_at).desc())
    )
    result = await session.execute(stmt)
    return [SessionRead.model_validate(s) for s in result.scalars().all()]
