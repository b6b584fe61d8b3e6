"""
Free Consultation Fraud Prevention.

Each client gets one free consultation. Repeat attempts are detected by
email address, by the user's account flag, and by IP address and device
fingerprint over a rolling 30-day window.
"""

import base64
from datetime import timedelta
from typing import NamedTuple, Optional

from fastapi import Request
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from diligence_labs.core.database import utc_now
from diligence_labs.core.database.entities.consultations import ConsultationSession
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.logging_config import get_logger

logger = get_logger(__name__)

LOOKBACK = timedelta(days=30)
MAX_FREE_PER_IP = 2
MAX_FREE_PER_FINGERPRINT = 1

EMAIL_ALREADY_USED = "A free consultation has already been booked with this email address."
ACCOUNT_ALREADY_USED = "You have already used your free consultation. Please book a paid consultation."
IP_LIMIT_REACHED = "Multiple free consultations have been detected from this location. Please contact support."
DEVICE_ALREADY_USED = (
    "A free consultation has already been booked from this device. Please use a different email or contact support."
)

_IP_HEADERS = ("x-real-ip", "cf-connecting-ip", "x-client-ip")


class ClientInfo(NamedTuple):
    ip_address: str
    user_agent: str
    fingerprint: str


class Eligibility(NamedTuple):
    eligible: bool
    reason: Optional[str] = None
    user: Optional[User] = None


def get_client_ip(request: Request) -> str:
    """Client IP from the proxy headers, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded and forwarded.split(",")[0].strip():
        return forwarded.split(",")[0].strip()
    for header in _IP_HEADERS:
        value = request.headers.get(header)
        if value:
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_client_info(request: Request) -> ClientInfo:
    ip_address = get_client_ip(request)
    user_agent = request.headers.get("user-agent") or "unknown"
    fingerprint = base64.b64encode(f"{ip_address}-{user_agent}".encode()).decode()
    return ClientInfo(ip_address=ip_address, user_agent=user_agent, fingerprint=fingerprint)


async def _count_recent_free(session: AsyncSession, condition) -> int:
    since = utc_now() - LOOKBACK
    stmt = (
        select(func.count())
        .select_from(ConsultationSession)
        .where(condition)
        .where((ConsultationSession.is_free_consultation == True) & (ConsultationSession.created_at >= since))
    )
    return int((await session.execute(stmt)).scalar_one())


async def check_free_consultation_eligibility(
    session: AsyncSession, email: str, client: ClientInfo
) -> Eligibility:
    """
    Decide whether a free consultation may be booked.

    Args:
        session: Database session
        email: Lowercased guest email
        client: Client IP and fingerprint of the request

    Returns:
        Eligibility with the reason when not eligible, and the existing
        user for the email if there is one.
    """
    user = (await session.execute(select(User).where(User.email == email))).scalars().first()

    guest_stmt = select(ConsultationSession.id).where(
        (ConsultationSession.guest_email == email) & (ConsultationSession.is_free_consultation == True)
    )
    if (await session.execute(guest_stmt)).first() is not None:
        return Eligibility(False, EMAIL_ALREADY_USED, user)

    if user is not None and user.free_consultation_used:
        return Eligibility(False, ACCOUNT_ALREADY_USED, user)

    by_ip = await _count_recent_free(session, ConsultationSession.client_ip_address == client.ip_address)
    if by_ip >= MAX_FREE_PER_IP:
        logger.warning(f"Free consultation IP limit reached for {client.ip_address}")
        return Eligibility(False, IP_LIMIT_REACHED, user)

    by_device = await _count_recent_free(session, ConsultationSession.client_fingerprint == client.fingerprint)
    if by_device >= MAX_FREE_PER_FINGERPRINT:
        logger.warning(f"Free consultation device limit reached for {client.ip_address}")
        return Eligibility(False, DEVICE_ALREADY_USED, user)

    return Eligibility(True, None, user)


def mark_free_consultation_used(user: User) -> None:
    user.free_consultation_used = True
    user.free_consultation_date = utc_now()
