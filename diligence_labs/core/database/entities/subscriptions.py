"""
Subscription entity model.

Subscriptions are recorded locally; payment processing is not part of
this service.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Subscription(Base, table=True):
    """A user's plan subscription for one billing period.

    Table: subscriptions
    """

    __tablename__ = "subscriptions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    plan_type: str
    billing_cycle: str = Field(default="MONTHLY")
    status: str = Field(default="ACTIVE", index=True)
    amount: float = Field(default=0.0)
    current_period_start: datetime = Field(default_factory=utc_now)
    current_period_end: datetime = Field(index=True)
    cancel_at_period_end: bool = Field(default=False)
    canceled_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Subscription(id={self.id}, plan={self.plan_type}, status={self.status})"
