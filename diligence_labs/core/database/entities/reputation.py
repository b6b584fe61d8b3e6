"""
Reputation entity models.

Submitter reputation is tracked per user in ``user_reputations``; notable
milestones for users and experts are recorded as ``achievements``.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class UserReputation(Base, table=True):
    """Accumulated submitter reputation for one user.

    Table: user_reputations
    """

    __tablename__ = "user_reputations"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)
    total_points: int = Field(default=0)
    level: int = Field(default=1)
    projects_submitted: int = Field(default=0)
    quality_projects: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"UserReputation(user_id={self.user_id}, points={self.total_points}, level={self.level})"


class Achievement(Base, table=True):
    """Milestone awarded to a user, optionally through their expert profile.

    Table: achievements
    """

    __tablename__ = "achievements"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    expert_id: Optional[str] = Field(default=None, foreign_key="expert_profiles.id", index=True)
    achievement_type: str = Field(description="TIER_PROMOTION or QUALITY_SUBMITTER")
    title: str
    description: Optional[str] = Field(default=None)
    points_awarded: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
