"""
Consultation Credit Accounting.

A subscription grants a number of consultation credits per billing period.
Every non-cancelled session created inside the period consumes one credit;
plans with ``UNLIMITED`` credits never run out.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database.entities.consultations import ConsultationSession
from diligence_labs.core.database.entities.subscriptions import Subscription
from diligence_labs.core.database.repositories import SubscriptionRepository
from diligence_labs.core.models.domain.enums import SessionStatus
from diligence_labs.core.models.io.consultations import SessionRead
from diligence_labs.core.models.io.subscriptions import (
    CanBookRead,
    CreditBalanceRead,
    SessionCounts,
    UsageReportRead,
    UsageSubscriptionSummary,
)

from .plans import UNLIMITED, consultation_credits, plan_name


def _in_period(subscription: Subscription):
    return (
        (ConsultationSession.user_id == subscription.user_id)
        & (ConsultationSession.created_at >= subscription.current_period_start)
        & (ConsultationSession.created_at <= subscription.current_period_end)
    )


async def _used_credits(session: AsyncSession, subscription: Subscription) -> int:
    stmt = (
        select(func.count())
        .select_from(ConsultationSession)
        .where(_in_period(subscription) & (ConsultationSession.status != SessionStatus.CANCELLED.value))
    )
    return int((await session.execute(stmt)).scalar_one())


def _balance(subscription: Subscription, used: int) -> CreditBalanceRead:
    total = consultation_credits(subscription.plan_type)
    if total == UNLIMITED:
        return CreditBalanceRead(
            total_credits=UNLIMITED,
            used_credits=used,
            remaining_credits=UNLIMITED,
            is_unlimited=True,
            period_start=subscription.current_period_start,
            period_end=subscription.current_period_end,
            plan_type=subscription.plan_type,
        )
    return CreditBalanceRead(
        total_credits=total,
        used_credits=used,
        remaining_credits=max(0, total - used),
        is_unlimited=False,
        period_start=subscription.current_period_start,
        period_end=subscription.current_period_end,
        plan_type=subscription.plan_type,
    )


async def get_credit_balance(session: AsyncSession, user_id: str) -> Optional[CreditBalanceRead]:
    """Credit balance for the user's current subscription, or ``None`` without one."""
    subscription = await SubscriptionRepository(session).get_current(user_id)
    if subscription is None:
        return None
    return _balance(subscription, await _used_credits(session, subscription))


def evaluate_can_book(balance: Optional[CreditBalanceRead]) -> CanBookRead:
    if balance is None:
        return CanBookRead(
            can_book=False,
            reason="No active subscription. Please subscribe to a plan or book a free consultation.",
        )
    if balance.is_unlimited or balance.remaining_credits > 0:
        return CanBookRead(can_book=True, credit_balance=balance)
    reset = balance.period_end.date().isoformat() if balance.period_end else "the next billing period"
    return CanBookRead(
        can_book=False,
        reason=f"Monthly credit limit reached. Credits reset on {reset}",
        credit_balance=balance,
    )


async def can_book_consultation(session: AsyncSession, user_id: str) -> CanBookRead:
    return evaluate_can_book(await get_credit_balance(session, user_id))


async def get_usage_report(session: AsyncSession, user_id: str) -> UsageReportRead:
    """
    Summarize the user's consumption for the current billing period.

    Without a subscription the report is empty.
    """
    subscription = await SubscriptionRepository(session).get_current(user_id)
    if subscription is None:
        return UsageReportRead(
            sessions_this_period=[],
            counts=SessionCounts(total=0, completed=0, pending=0, cancelled=0),
        )

    stmt = (
        select(ConsultationSession)
        .where(_in_period(subscription))
        .order_by(col(ConsultationSession.created_at).desc())
    )
    sessions: List[ConsultationSession] = list((await session.execute(stmt)).scalars().all())
    used = sum(1 for s in sessions if s.status != SessionStatus.CANCELLED.value)

    return UsageReportRead(
        subscription=UsageSubscriptionSummary(
            id=subscription.id,
            plan_type=subscription.plan_type,
            plan_name=plan_name(subscription.plan_type),
            status=subscription.status,
            current_period_start=subscription.current_period_start,
            current_period_end=subscription.current_period_end,
            cancel_at_period_end=subscription.cancel_at_period_end,
        ),
        credit_balance=_balance(subscription, used),
        sessions_this_period=[SessionRead.model_validate(s) for s in sessions],
        counts=SessionCounts(
            total=len(sessions),
            completed=sum(1 for s in sessions if s.status == SessionStatus.COMPLETED.value),
            pending=sum(1 for s in sessions if s.status == SessionStatus.PENDING.value),
            cancelled=sum(1 for s in sessions if s.status == SessionStatus.CANCELLED.value),
        ),
    )
