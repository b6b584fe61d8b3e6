"""
Guest Booking Endpoints.

Visitors can book a consultation without an account. Free bookings are
limited to one per person by the fraud prevention checks; guests who are
not yet users are invited to create an account.
"""

from datetime import timedelta

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.consultations import ConsultationSession
from diligence_labs.core.database.repositories import UserRepository
from diligence_labs.core.errors import ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import SessionStatus
from diligence_labs.core.models.io.consultations import GuestBookingRequest, GuestBookingResponse
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.core.security import generate_verification_token
from diligence_labs.server.core.config import settings
from diligence_labs.server.services import email_templates
from diligence_labs.server.services.deps import EmailSenderDep
from diligence_labs.server.services.fraud_prevention import (
    check_free_consultation_eligibility,
    get_client_info,
    mark_free_consultation_used,
)
from diligence_labs.server.services.rate_limiter import rate_limit

logger = get_logger(__name__)

router = APIRouter()

INVITATION_TTL = timedelta(days=7)


@router.post(
    "/book-consultation",
    response_model=GuestBookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book Consultation as Guest",
    description="Book a consultation without an account. Free consultations are limited to one per client.",
    responses={400: {"description": "Invalid input or not eligible for a free consultation"}},
    dependencies=[Depends(rate_limit)],
)
async def book_consultation(
    payload: GuestBookingRequest,
    request: Request,
    sender: EmailSenderDep,
    session: AsyncSession = Depends(get_session),
) -> GuestBookingResponse:
    """
    Book a consultation as a guest.

    - Free bookings must pass the eligibility checks (email, account, IP,
      device).
    - A booking by an existing user's email is attached to that user.
    - Otherwise an invitation token valid for 7 days is issued and emailed
      when ``sendAccountInvite`` is set.
    """
    email = payload.guest_email.lower()
    client = get_client_info(request)

    if payload.is_free_consultation:
        eligibility = await check_free_consultation_eligibility(session, email, client)
        if not eligibility.eligible:
            logger.info(f"Free consultation refused for {email}: {eligibility.reason}")
            raise ValidationError(eligibility.reason, details={"fraudPrevention": True})
        existing_user = eligibility.user
    else:
        existing_user = await UserRepository(session).get_by_email(email)

    booking = ConsultationSession(
        consultation_type=payload.consultation_type.value,
        description=payload.description,
        status=SessionStatus.PENDING.value,
        is_free_consultation=payload.is_free_consultation,
        client_ip_address=client.ip_address,
        client_fingerprint=client.fingerprint,
    )

    invite_token = None
    if existing_user is not None:
        booking.user_id = existing_user.id
        if payload.is_free_consultation:
            mark_free_consultation_used(existing_user)
            session.add(existing_user)
    else:
        booking.guest_email = email
        booking.guest_name = payload.guest_name
        booking.guest_phone = payload.guest_phone
        if payload.send_account_invite:
            invite_token = generate_verification_token()
            booking.account_creation_token = invite_token
            booking.account_creation_token_expires = utc_now() + INVITATION_TTL

    session.add(booking)
    await session.commit()
    await session.refresh(booking)

    invite_sent = False
    if invite_token is not None:
        url = f"{settings.app_base_url}/create-account?token={invite_token}"
        template = email_templates.account_invitation(url, booking.consultation_type, payload.is_free_consultation)
        invite_sent = await sender.send(email, template)

    log_business_event(
        "consultation.guest_booked",
        session_id=booking.id,
        existing_user=existing_user is not None,
        free=payload.is_free_consultation,
    )

    if payload.is_free_consultation:
        message = "Free consultation booked successfully"
    else:
        message = "Consultation booked successfully"
    return GuestBookingResponse(
        message=message,
        session_id=booking.id,
        account_invite_sent=invite_sent,
        existing_user=existing_user is not None,
        is_free_consultation=payload.is_free_consultation,
    )
