"""Subscription, plan catalog and credit usage I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from ..domain.enums import BillingCycle, PlanType
from .base import CamelModel
from .consultations import SessionRead


class SubscriptionCreate(CamelModel):
    plan_type: Literal["BASIC_MONTHLY", "PROFESSIONAL_MONTHLY", "ENTERPRISE_MONTHLY"]
    billing_cycle: BillingCycle = BillingCycle.MONTHLY


class SubscriptionRead(CamelModel):
    id: str
    user_id: str
    plan_type: str
    billing_cycle: str
    status: str
    amount: float
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool
    canceled_at: Optional[datetime] = None
    created_at: datetime


class CurrentSubscriptionResponse(CamelModel):
    subscription: Optional[SubscriptionRead] = None
    plan_type: PlanType
    plan_name: str
    is_free_tier: bool


class ManageSubscriptionRequest(CamelModel):
    action: str
    subscription_id: str


class CreditBalanceRead(CamelModel):
    total_credits: int
    used_credits: int
    remaining_credits: int
    is_unlimited: bool
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    plan_type: Optional[str] = None


class CanBookRead(CamelModel):
    can_book: bool
    reason: Optional[str] = None
    credit_balance: Optional[CreditBalanceRead] = None


class SessionCounts(CamelModel):
    total: int
    completed: int
    pending: int
    cancelled: int


class UsageSubscriptionSummary(CamelModel):
    id: str
    plan_type: str
    plan_name: str
    status: str
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool


class UsageReportRead(CamelModel):
    subscription: Optional[UsageSubscriptionSummary] = None
    credit_balance: Optional[CreditBalanceRead] = None
    sessions_this_period: List[SessionRead]
    counts: SessionCounts


class UsageResponse(CamelModel):
    credit_balance: Optional[CreditBalanceRead] = None
    usage_report: UsageReportRead
    can_book: CanBookRead


class PlanRead(CamelModel):
    plan_type: PlanType
    name: str
    description: str
    monthly_price: float
    yearly_price: float
    consultation_credits: int
    features: List[str]
    consultation_types: List[str]
    priority_booking: bool
    report_access: bool
    team_members: int
    rollover_credits: bool


class AdminSubscriptionRead(SubscriptionRead):
    user_email: Optional[str] = None
    user_name: Optional[str] = None
