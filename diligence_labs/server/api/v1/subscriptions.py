"""
Subscription Endpoints.

The public plan catalog, creating and managing the caller's subscription,
and the consultation credit usage for the current billing period.
"""

from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.subscriptions import Subscription
from diligence_labs.core.database.repositories import SubscriptionRepository
from diligence_labs.core.errors import ConflictError, NotFoundError, ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import BillingCycle, PlanType, SubscriptionStatus
from diligence_labs.core.models.io.subscriptions import (
    CurrentSubscriptionResponse,
    ManageSubscriptionRequest,
    PlanRead,
    SubscriptionCreate,
    SubscriptionRead,
    UsageResponse,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services import credits
from diligence_labs.server.services.deps import CurrentUserDep
from diligence_labs.server.services.plans import PLANS, get_plan, plan_price, yearly_price

logger = get_logger(__name__)

router = APIRouter()
plans_router = APIRouter()

PERIOD_LENGTH = {
    BillingCycle.MONTHLY: timedelta(days=30),
    BillingCycle.YEARLY: timedelta(days=365),
}

MANAGE_ACTIONS = ("cancel", "cancel_immediate")


@plans_router.get(
    "",
    response_model=List[PlanRead],
    summary="List Subscription Plans",
    description="Return the subscription plan catalog, including the free tier.",
)
async def list_plans() -> List[PlanRead]:
    return [PlanRead(**plan.model_dump(exclude={"yearly_price"}), yearly_price=yearly_price(plan)) for plan in PLANS]


@router.post(
    "",
    response_model=SubscriptionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Subscription",
    description="Start a subscription on a paid plan for the authenticated user.",
    responses={409: {"description": "User already has an active subscription"}},
)
async def create_subscription(
    payload: SubscriptionCreate,
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_session),
) -> SubscriptionRead:
    """
    Create a subscription.

    The period is 30 days for monthly billing and 365 days for yearly
    billing; the amount is the plan's price for the chosen cycle.
    """
    repo = SubscriptionRepository(session)
    if await repo.get_current(user.id) is not None:
        raise ConflictError("User already has an active subscription")

    now = utc_now()
    subscription = await repo.create(
        Subscription(
            user_id=user.id,
            plan_type=payload.plan_type,
            billing_cycle=payload.billing_cycle.value,
            status=SubscriptionStatus.ACTIVE.value,
            amount=plan_price(payload.plan_type, payload.billing_cycle.value),
            current_period_start=now,
            current_period_end=now + PERIOD_LENGTH[payload.billing_cycle],
        )
    )
    await session.commit()
    await session.refresh(subscription)

    log_business_event("subscription.created", user_id=user.id, plan_type=subscription.plan_type)
    return SubscriptionRead.model_validate(subscription)


@router.get(
    "/current",
    response_model=CurrentSubscriptionResponse,
    summary="Current Subscription",
    description="Return the user's active subscription, or the free tier placeholder without one.",
)
async def current_subscription(
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_session),
) -> CurrentSubscriptionResponse:
    subscription = await SubscriptionRepository(session).get_current(user.id)
    if subscription is None:
        free = get_plan(PlanType.FREE.value)
        return CurrentSubscriptionResponse(plan_type=PlanType.FREE, plan_name=free.name, is_free_tier=True)

    plan = get_plan(subscription.plan_type)
    return CurrentSubscriptionResponse(
        subscription=SubscriptionRead.model_validate(subscription),
        plan_type=PlanType(subscription.plan_type),
        plan_name=plan.name if plan else subscription.plan_type,
        is_free_tier=False,
    )


@router.post(
    "/manage",
    response_model=SubscriptionRead,
    summary="Manage Subscription",
    description="Cancel at the end of the period (`cancel`) or right away (`cancel_immediate`).",
    responses={400: {"description": "Unknown action"}, 404: {"description": "Subscription not found"}},
)
async def manage_subscription(
    payload: ManageSubscriptionRequest,
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_session),
) -> SubscriptionRead:
    if payload.action not in MANAGE_ACTIONS:
        raise ValidationError(f"Invalid action: {payload.action}")

    subscription = await SubscriptionRepository(session).get_for_user(payload.subscription_id, user.id)
    if subscription is None:
        raise NotFoundError("Subscription")

    if payload.action == "cancel":
        subscription.cancel_at_period_end = True
    else:
        subscription.status = SubscriptionStatus.CANCELED.value
        subscription.canceled_at = utc_now()
    session.add(subscription)
    await session.commit()
    await session.refresh(subscription)

    log_business_event("subscription.managed", subscription_id=subscription.id, action=payload.action)
    return SubscriptionRead.model_validate(subscription)


@router.get(
    "/usage",
    response_model=UsageResponse,
    summary="Subscription Usage",
    description="Credit balance, usage report and booking eligibility for the current billing period.",
)
async def subscription_usage(user: CurrentUserDep, session: AsyncSession = Depends(get_session)) -> UsageResponse:
    balance = await credits.get_credit_balance(session, user.id)
    return UsageResponse(
        credit_balance=balance,
        usage_report=await credits.get_usage_report(session, user.id),
        can_book=credits.evaluate_can_book(balance),
    )
