"""
Expert profile entity model.

An expert profile is an application by a user to evaluate submitted
projects. Expertise areas are stored as JSON arrays for SQLModel
compatibility, with list helpers mirroring the other JSON-backed columns.
"""

import json
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field

from ..base import Base, load_json_list, new_id, utc_now


class ExpertProfileBase(Base):
    """Base fields for an expert profile."""

    linkedin_url: Optional[str] = Field(default=None)
    github_url: Optional[str] = Field(default=None)
    twitter_handle: Optional[str] = Field(default=None)
    company: Optional[str] = Field(default=None)
    position: Optional[str] = Field(default=None)
    years_experience: Optional[int] = Field(default=None)
    bio: Optional[str] = Field(default=None)
    primary_expertise: str = Field(default="[]", description="JSON array of primary expertise areas")
    secondary_expertise: str = Field(default="[]", description="JSON array of secondary expertise areas")


class ExpertProfile(ExpertProfileBase, table=True):
    """Persistent expert profile.

    Table: expert_profiles
    """

    __tablename__ = "expert_profiles"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)

    verification_status: str = Field(default="PENDING", index=True)
    expert_tier: str = Field(default="BRONZE")
    reputation_points: int = Field(default=0, index=True)
    total_evaluations: int = Field(default=0)
    monthly_evaluations: int = Field(default=0)
    total_rewards: float = Field(default=0.0)
    verified_at: Optional[datetime] = Field(default=None)
    review_notes: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def get_primary_expertise_list(self) -> List[str]:
        """Get primary expertise as a list."""
        return load_json_list(self.primary_expertise)

    def set_primary_expertise_list(self, expertise: List[str]) -> None:
        """Set primary expertise from a list."""
        self.primary_expertise = json.dumps(expertise)

    def get_secondary_expertise_list(self) -> List[str]:
        """Get secondary expertise as a list."""
        return load_json_list(self.secondary_expertise)

    def set_secondary_expertise_list(self, expertise: List[str]) -> None:
        """Set secondary expertise from a list."""
        self.secondary_expertise = json.dumps(expertise)

    @property
    def is_verified(self) -> bool:
        return self.verification_status == "VERIFIED"

    def __repr__(self) -> str:
        return f"ExpertProfile(id={self.id}, status={self.verification_status}, tier={self.expert_tier})"
