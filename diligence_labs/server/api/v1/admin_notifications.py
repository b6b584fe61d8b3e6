"""
Admin Notification Endpoints.

Subscription expiry reminders (a run that emails subscribers whose period
ends in exactly N days, and a preview of upcoming expiries) and the log of
every notification admins have sent.
"""

import math
from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.activity import AdminNotificationLog
from diligence_labs.core.database.repositories import SubscriptionRepository, pagination
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import NotificationType
from diligence_labs.core.models.io.admin import (
    ExpiringSubscription,
    ExpiringSubscriptionsResponse,
    ExpiringSummary,
    ExpiryCheckRequest,
    ExpiryCheckResponse,
    ExpiryCheckSummary,
    ExpiryNotificationResult,
    NotificationHistoryResponse,
    NotificationLogRead,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.core.config import settings
from diligence_labs.server.services import email_templates
from diligence_labs.server.services.deps import AdminDep, EmailSenderDep, ModeratorDep
from diligence_labs.server.services.plans import plan_name

logger = get_logger(__name__)

router = APIRouter()

DEDUPE_WINDOW = timedelta(hours=24)
URGENT_DAYS = 7
CRITICAL_DAYS = 3


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


async def _recently_notified(session: AsyncSession, user_id: str, days_remaining: int, since: datetime) -> bool:
    stmt = select(AdminNotificationLog.id).where(
        (AdminNotificationLog.user_id == user_id)
        & (AdminNotificationLog.notification_type == NotificationType.SUBSCRIPTION_EXPIRATION.value)
        & (AdminNotificationLog.days_remaining == days_remaining)
        & (AdminNotificationLog.created_at >= since)
    )
    return (await session.execute(stmt)).first() is not None


@router.post(
    "/subscription-expiry",
    response_model=ExpiryCheckResponse,
    summary="Send Expiry Reminders",
    description="Email subscribers whose period ends in each of the given numbers of days. "
    "`testMode` reports who would be emailed without sending.",
)
async def send_expiry_reminders(
    admin: AdminDep,
    sender: EmailSenderDep,
    payload: Optional[ExpiryCheckRequest] = None,
    session: AsyncSession = Depends(get_session),
) -> ExpiryCheckResponse:
    """
    Run the subscription expiry reminders.

    For each ``d`` in ``daysToCheck`` this finds ACTIVE subscriptions ending
    on the calendar day ``today + d``. A subscriber already reminded for
    the same ``d`` in the last 24 hours is skipped.
    """
    payload = payload or ExpiryCheckRequest()
    repo = SubscriptionRepository(session)
    now = utc_now()
    today = start_of_day(now)

    results: List[ExpiryNotificationResult] = []
    checked = sent = errors = 0
    for days in payload.days_to_check:
        day_start = today + timedelta(days=days)
        for subscription, user in await repo.active_ending_between(day_start, day_start + timedelta(days=1)):
            checked += 1
            result = ExpiryNotificationResult(
                user_id=user.id,
                email=user.email,
                subscription_id=subscription.id,
                days_remaining=days,
                status="SENT",
            )
            results.append(result)

            if await _recently_notified(session, user.id, days, now - DEDUPE_WINDOW):
                result.status = "SKIPPED"
                continue
            if payload.test_mode:
                result.status = "TEST_MODE"
                continue

            template = email_templates.subscription_expiration(
                user.name or "Subscriber",
                plan_name(subscription.plan_type),
                f"{subscription.current_period_end:%B %d, %Y}",
                days,
                f"{settings.app_base_url}/dashboard/subscription",
            )
            delivered = await sender.send(user.email, template)
            log_entry = AdminNotificationLog(
                user_id=user.id,
                admin_id=admin.id,
                notification_type=NotificationType.SUBSCRIPTION_EXPIRATION.value,
                subject=template.subject,
                recipient_email=user.email,
                days_remaining=days,
                success=delivered,
            )
            log_entry.set_details({"subscriptionId": subscription.id, "planType": subscription.plan_type})
            session.add(log_entry)

            if delivered:
                sent += 1
            else:
                errors += 1
                result.status = "FAILED"
                result.error = "Email delivery failed"
    await session.commit()

    log_business_event(
        "admin.expiry_reminders",
        test_mode=payload.test_mode,
        subscriptions_checked=checked,
        notifications_sent=sent,
        errors=errors,
    )
    return ExpiryCheckResponse(
        test_mode=payload.test_mode,
        summary=ExpiryCheckSummary(subscriptions_checked=checked, notifications_sent=sent, errors=errors),
        notifications=results,
    )


@router.get(
    "/subscription-expiry",
    response_model=ExpiringSubscriptionsResponse,
    summary="Upcoming Expiries",
    description="ACTIVE subscriptions ending within the next `days` days, soonest first.",
)
async def upcoming_expiries(
    admin: ModeratorDep,
    days: int = Query(default=30, ge=1, le=365),
    session: AsyncSession = Depends(get_session),
) -> ExpiringSubscriptionsResponse:
    now = utc_now()
    rows = await SubscriptionRepository(session).active_ending_between(now, now + timedelta(days=days))

    subscriptions = []
    for subscription, user in rows:
        remaining = math.ceil((subscription.current_period_end - now).total_seconds() / 86400)
        subscriptions.append(
            ExpiringSubscription(
                subscription_id=subscription.id,
                user_id=user.id,
                user_email=user.email,
                user_name=user.name,
                plan_type=subscription.plan_type,
                current_period_end=subscription.current_period_end,
                days_remaining=remaining,
                is_urgent=remaining <= URGENT_DAYS,
                is_critical=remaining <= CRITICAL_DAYS,
            )
        )

    return ExpiringSubscriptionsResponse(
        subscriptions=subscriptions,
        summary=ExpiringSummary(
            total=len(subscriptions),
            urgent=sum(1 for s in subscriptions if s.is_urgent),
            critical=sum(1 for s in subscriptions if s.is_critical),
        ),
    )


@router.get(
    "/history",
    response_model=NotificationHistoryResponse,
    summary="Notification History",
    description="Notifications sent by admins, newest first, by recipient and type.",
)
async def notification_history(
    admin: ModeratorDep,
    user_id: Optional[str] = Query(default=None, alias="userId"),
    notification_type: Optional[str] = Query(default=None, alias="type"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> NotificationHistoryResponse:
    conditions = []
    if user_id:
        conditions.append(AdminNotificationLog.user_id == user_id)
    if notification_type:
        conditions.append(AdminNotificationLog.notification_type == notification_type)

    stmt = (
        select(AdminNotificationLog)
        .where(*conditions)
        .order_by(col(AdminNotificationLog.created_at).desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    count_stmt = select(func.count()).select_from(AdminNotificationLog).where(*conditions)
    entries = (await session.execute(stmt)).scalars().all()
    total = int((await session.execute(count_stmt)).scalar_one())
    return NotificationHistoryResponse(
        notifications=[NotificationLogRead.model_validate(e) for e in entries],
        pagination=pagination(page, limit, total),
    )
