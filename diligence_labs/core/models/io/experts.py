"""Expert profile and application review I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..domain.enums import ApplicationAction
from .base import CamelModel, Pagination


class ExpertProfileUpsert(CamelModel):
    """Schema for creating or updating the caller's expert profile."""

    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    twitter_handle: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    years_experience: Optional[int] = Field(default=None, ge=0, le=60)
    bio: Optional[str] = Field(default=None, max_length=2000)
    primary_expertise: List[str] = Field(default_factory=list)
    secondary_expertise: List[str] = Field(default_factory=list)


class ExpertProfileRead(CamelModel):
    id: str
    user_id: str
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    twitter_handle: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    years_experience: Optional[int] = None
    bio: Optional[str] = None
    primary_expertise: List[str]
    secondary_expertise: List[str]
    verification_status: str
    expert_tier: str
    reputation_points: int
    total_evaluations: int
    monthly_evaluations: int
    total_rewards: float
    verified_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, profile) -> "ExpertProfileRead":
        data = profile.model_dump()
        data["primary_expertise"] = profile.get_primary_expertise_list()
        data["secondary_expertise"] = profile.get_secondary_expertise_list()
        return cls.model_validate(data)


class LeaderboardEntry(CamelModel):
    rank: int
    expert_id: str
    name: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    expert_tier: str
    reputation_points: int
    total_evaluations: int
    total_rewards: float
    primary_expertise: List[str]


class LeaderboardResponse(CamelModel):
    experts: List[LeaderboardEntry]
    pagination: Pagination


class ExpertApplicationRead(ExpertProfileRead):
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class ApplicationReviewRequest(CamelModel):
    expert_id: str
    action: ApplicationAction
    review_notes: Optional[str] = None


class ApplicationReviewResponse(CamelModel):
    message: str
    expert_id: str
    action: ApplicationAction
    new_status: str
    email_sent: bool


class BulkApplicationReviewRequest(CamelModel):
    expert_ids: List[str] = Field(min_length=1)
    action: ApplicationAction
    review_notes: Optional[str] = None


class BulkReviewResult(CamelModel):
    expert_id: str
    status: str
    new_status: Optional[str] = None
    email_sent: bool = False
    error: Optional[str] = None


class BulkReviewSummary(CamelModel):
    total: int
    successful: int
    failed: int


class BulkApplicationReviewResponse(CamelModel):
    message: str
    results: List[BulkReviewResult]
    summary: BulkReviewSummary
