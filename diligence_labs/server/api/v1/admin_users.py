"""
Admin User Management Endpoints.

Moderators search user accounts and email users; admins change an
account's status, which unlocks it and tells the user about the change.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.activity import AdminNotificationLog
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.database.repositories import pagination
from diligence_labs.core.errors import NotFoundError, ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import AccountStatus, NotificationType
from diligence_labs.core.models.io.admin import (
    AdminUserList,
    AdminUserRead,
    SendNotificationRequest,
    SendNotificationResponse,
    UserStatusUpdate,
    UserStatusUpdateResponse,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services import email_templates
from diligence_labs.server.services.activity import record_activity
from diligence_labs.server.services.deps import AdminDep, EmailSenderDep, ModeratorDep
from diligence_labs.server.services.email_templates import EmailTemplate

logger = get_logger(__name__)

router = APIRouter()


def build_notification(user: User, payload: SendNotificationRequest) -> EmailTemplate:
    """
    Render the email for an admin notification.

    ``details`` carries the type-specific fields: ``status`` and
    ``actionRequired`` for subscription updates, ``activityType``,
    ``ipAddress`` and ``timestamp`` for security alerts.
    """
    name = user.name or "User"
    details = payload.details
    if payload.notification_type == NotificationType.SUBSCRIPTION_STATUS.value:
        return email_templates.subscription_status(
            name,
            str(details.get("status", "Updated")),
            payload.message or str(details.get("details", "")),
            details.get("actionRequired"),
        )
    if payload.notification_type == NotificationType.SECURITY_ALERT.value:
        return email_templates.security_alert(
            name,
            str(details.get("activityType", payload.subject or "Account activity")),
            payload.message or str(details.get("details", "")),
            ip_address=details.get("ipAddress"),
            timestamp=details.get("timestamp"),
        )
    if not payload.subject or not payload.message:
        raise ValidationError("Subject and message are required for custom notifications")
    return email_templates.custom(name, payload.subject, payload.message)


@router.get(
    "",
    response_model=AdminUserList,
    summary="List Users",
    description="Search users by name or email and filter by account status, newest first.",
)
async def list_users(
    admin: ModeratorDep,
    search: Optional[str] = None,
    account_status: Optional[AccountStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> AdminUserList:
    conditions = []
    if search:
        pattern = f"%{search.strip().lower()}%"
        conditions.append(or_(func.lower(User.name).like(pattern), col(User.email).like(pattern)))
    if account_status:
        conditions.append(User.account_status == account_status.value)

    stmt = (
        select(User)
        .where(*conditions)
        .order_by(col(User.created_at).desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    count_stmt = select(func.count()).select_from(User).where(*conditions)
    users = (await session.execute(stmt)).scalars().all()
    total = int((await session.execute(count_stmt)).scalar_one())
    return AdminUserList(
        users=[AdminUserRead.model_validate(u) for u in users],
        pagination=pagination(page, limit, total),
    )


@router.put(
    "/{user_id}/status",
    response_model=UserStatusUpdateResponse,
    summary="Update Account Status",
    description="Set a user's account status. Clears any lockout; the user is emailed when the status changed.",
    responses={404: {"description": "User not found"}},
)
async def update_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    admin: AdminDep,
    sender: EmailSenderDep,
    session: AsyncSession = Depends(get_session),
) -> UserStatusUpdateResponse:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User")

    previous = user.account_status
    user.account_status = payload.account_status.value
    user.status_reason = payload.reason
    user.status_changed_at = utc_now()
    user.status_changed_by = admin.id
    user.account_locked_until = None
    user.failed_login_attempts = 0
    session.add(user)
    record_activity(
        session,
        "USER_STATUS_CHANGED",
        user_id=user.id,
        admin_id=admin.id,
        previous_status=previous,
        new_status=user.account_status,
        reason=payload.reason,
    )
    await session.commit()
    await session.refresh(user)

    email_sent = False
    if previous != user.account_status:
        template = email_templates.account_status(user.name or "User", user.account_status, payload.reason)
        email_sent = await sender.send(user.email, template)
        session.add(
            AdminNotificationLog(
                user_id=user.id,
                admin_id=admin.id,
                notification_type=NotificationType.ACCOUNT_STATUS.value,
                subject=template.subject,
                recipient_email=user.email,
                success=email_sent,
            )
        )
        await session.commit()
        if not email_sent:
            logger.warning(f"Account status email to user {user.id} was not delivered")

    log_business_event(
        "admin.user_status_changed",
        user_id=user.id,
        previous_status=previous,
        new_status=user.account_status,
        admin_id=admin.id,
    )
    return UserStatusUpdateResponse(
        message=f"User status updated to {user.account_status}",
        user=AdminUserRead.model_validate(user),
        email_sent=email_sent,
    )


@router.post(
    "/{user_id}/send-notification",
    response_model=SendNotificationResponse,
    summary="Send Notification",
    description="Email a subscription status update, a security alert or a custom message to a user.",
    responses={400: {"description": "Missing subject or message"}, 404: {"description": "User not found"}},
)
async def send_notification(
    user_id: str,
    payload: SendNotificationRequest,
    admin: ModeratorDep,
    sender: EmailSenderDep,
    session: AsyncSession = Depends(get_session),
) -> SendNotificationResponse:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User")

    template = build_notification(user, payload)
    success = await sender.send(user.email, template)

    log_entry = AdminNotificationLog(
        user_id=user.id,
        admin_id=admin.id,
        notification_type=payload.notification_type,
        subject=template.subject,
        recipient_email=user.email,
        success=success,
    )
    log_entry.set_details(payload.details)
    session.add(log_entry)
    await session.commit()

    log_business_event(
        "admin.notification_sent",
        user_id=user.id,
        notification_type=payload.notification_type,
        success=success,
    )
    return SendNotificationResponse(
        message="Notification sent successfully" if success else "Failed to send notification",
        success=success,
        notification_type=payload.notification_type,
        recipient=user.email,
    )
