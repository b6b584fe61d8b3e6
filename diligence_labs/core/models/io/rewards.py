"""Reward distribution I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import CamelModel, Pagination


class DistributeRewardsRequest(CamelModel):
    project_id: str = Field(min_length=1)
    total_fee: float = Field(gt=0)


class DistributionSummary(CamelModel):
    total_fee: float
    platform_fee: float
    expert_pool: float
    submitter_bonus: float
    experts_rewarded: int
    total_expert_rewards: float


class DistributeRewardsResponse(CamelModel):
    message: str
    distribution: DistributionSummary
    reward_distribution_id: str


class PayoutRead(CamelModel):
    id: str
    user_id: str
    expert_id: Optional[str] = None
    evaluation_id: Optional[str] = None
    payout_type: str
    amount: float
    multiplier: float
    status: str
    created_at: datetime


class DistributionRead(CamelModel):
    id: str
    project_id: str
    total_fee: float
    platform_fee: float
    expert_pool: float
    submitter_bonus: float
    status: str
    distributed_by: Optional[str] = None
    distributed_at: Optional[datetime] = None
    created_at: datetime
    payouts: List[PayoutRead] = Field(default_factory=list)


class DistributionHistoryResponse(CamelModel):
    distributions: List[DistributionRead]
    pagination: Pagination
