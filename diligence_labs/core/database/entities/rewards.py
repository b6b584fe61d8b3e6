"""
Reward distribution entity models.

A distribution splits an evaluation fee between the platform, the experts
with approved evaluations and, for high-scoring projects, the submitter.
Each share paid out is recorded as an ``ExpertPayout`` row.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class RewardDistribution(Base, table=True):
    """Fee split for one project.

    Table: reward_distributions
    """

    __tablename__ = "reward_distributions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    total_fee: float
    platform_fee: float
    expert_pool: float
    submitter_bonus: float
    status: str = Field(default="PENDING")
    distributed_by: Optional[str] = Field(default=None)
    distributed_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"RewardDistribution(id={self.id}, project={self.project_id}, status={self.status})"


class ExpertPayout(Base, table=True):
    """A single share of a distribution.

    Table: expert_payouts
    """

    __tablename__ = "expert_payouts"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    distribution_id: str = Field(foreign_key="reward_distributions.id", index=True)
    user_id: str = Field(foreign_key="users.id", index=True, description="Recipient user")
    expert_id: Optional[str] = Field(default=None, foreign_key="expert_profiles.id", index=True)
    evaluation_id: Optional[str] = Field(default=None, foreign_key="project_evaluations.id")
    payout_type: str = Field(default="EVALUATION_REWARD")
    amount: float
    multiplier: float = Field(default=1.0)
    status: str = Field(default="PENDING")

    created_at: datetime = Field(default_factory=utc_now)
