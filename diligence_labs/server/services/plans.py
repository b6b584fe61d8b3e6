"""
Subscription Plan Catalog.

The catalog is static; subscriptions store the plan type and the amount
charged at creation time. ``FREE`` is never stored as a subscription, it is
the placeholder for users without one.
"""

from typing import List, Optional

from pydantic import BaseModel

from diligence_labs.core.models.domain.enums import BillingCycle, ConsultationType, PlanType

UNLIMITED = -1

_ALL_PAID_TYPES = [
    ConsultationType.STRATEGIC_ADVISORY.value,
    ConsultationType.DUE_DILIGENCE.value,
    ConsultationType.TOKEN_LAUNCH.value,
    ConsultationType.BLOCKCHAIN_INTEGRATION_ADVISORY.value,
]


class SubscriptionPlan(BaseModel):
    plan_type: PlanType
    name: str
    description: str
    monthly_price: float
    yearly_price: Optional[float] = None
    consultation_credits: int
    rollover_credits: bool
    features: List[str]
    consultation_types: List[str]
    priority_booking: bool
    report_access: bool
    team_members: int


PLANS: List[SubscriptionPlan] = [
    SubscriptionPlan(
        plan_type=PlanType.FREE,
        name="Basic",
        description="One-time free consultation for new clients",
        monthly_price=0,
        consultation_credits=1,
        rollover_credits=False,
        features=["1 Free Consultation", "Strategic Advisory", "Email Support", "Basic Project Assessment"],
        consultation_types=[ConsultationType.STRATEGIC_ADVISORY.value],
        priority_booking=False,
        report_access=False,
        team_members=0,
    ),
    SubscriptionPlan(
        plan_type=PlanType.BASIC_MONTHLY,
        name="Premium",
        description="Monthly subscription with enhanced features",
        monthly_price=299,
        consultation_credits=3,
        rollover_credits=True,
        features=[
            "3 Monthly Consultations",
            "All Consultation Types",
            "Priority Scheduling",
            "Priority Email Support",
            "Advanced Reports & Analytics",
            "Credit Rollover",
            "Team Collaboration",
            "Monthly Strategy Sessions",
        ],
        consultation_types=_ALL_PAID_TYPES,
        priority_booking=True,
        report_access=True,
        team_members=2,
    ),
    SubscriptionPlan(
        plan_type=PlanType.PROFESSIONAL_MONTHLY,
        name="Professional",
        description="Advanced monthly subscription for professional users",
        monthly_price=499,
        consultation_credits=6,
        rollover_credits=True,
        features=[
            "6 Monthly Consultations",
            "All Consultation Types",
            "Comprehensive Due Diligence",
            "Priority Support (24h response)",
            "Custom Reports & Analytics",
            "Team Collaboration",
            "Monthly Strategic Reviews",
            "Direct Expert Access",
        ],
        consultation_types=_ALL_PAID_TYPES,
        priority_booking=True,
        report_access=True,
        team_members=5,
    ),
    SubscriptionPlan(
        plan_type=PlanType.ENTERPRISE_MONTHLY,
        name="Enterprise",
        description="Top-tier monthly subscription for enterprise-level needs",
        monthly_price=999,
        consultation_credits=UNLIMITED,
        rollover_credits=True,
        features=[
            "Unlimited Monthly Consultations",
            "All Consultation Types",
            "White-glove Due Diligence",
            "24/7 Priority Support",
            "Custom Reports & Analytics",
            "Unlimited Team Collaboration",
            "Dedicated Account Manager",
            "Custom Integration Support",
        ],
        consultation_types=_ALL_PAID_TYPES,
        priority_booking=True,
        report_access=True,
        team_members=UNLIMITED,
    ),
]


def get_plan(plan_type: str) -> Optional[SubscriptionPlan]:
    return next((plan for plan in PLANS if plan.plan_type.value == plan_type), None)


def yearly_price(plan: SubscriptionPlan) -> float:
    return plan.yearly_price if plan.yearly_price is not None else plan.monthly_price * 12


def plan_price(plan_type: str, cycle: str) -> float:
    plan = get_plan(plan_type)
    if plan is None:
        return 0
    return plan.monthly_price if cycle == BillingCycle.MONTHLY.value else yearly_price(plan)


def consultation_credits(plan_type: str) -> int:
    plan = get_plan(plan_type)
    return plan.consultation_credits if plan else 0


def has_feature(plan_type: str, feature: str) -> bool:
    plan = get_plan(plan_type)
    return plan is not None and feature in plan.features


def can_access_consultation_type(plan_type: str, consultation_type: str) -> bool:
    plan = get_plan(plan_type)
    return plan is not None and consultation_type in plan.consultation_types


def plan_name(plan_type: str) -> str:
    plan = get_plan(plan_type)
    return plan.name if plan else plan_type
