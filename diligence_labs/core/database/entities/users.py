"""
User account entity models.

This module contains the database entity for client accounts, including
the credential, verification, lockout and project submission quota state
kept on each user.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class UserBase(Base):
    """Base fields for a user account."""

    name: Optional[str] = Field(default=None, description="Display name")
    email: str = Field(unique=True, index=True, description="Lowercased login email")
    role: str = Field(default="USER", description="USER, TEAM_MEMBER or ADMIN")
    account_status: str = Field(default="ACTIVE", description="ACTIVE, SUSPENDED, RESTRICTED or DISABLED")


class User(UserBase, table=True):
    """Persistent user account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    password_hash: Optional[str] = Field(default=None)

    # Email verification
    email_verified: Optional[datetime] = Field(default=None)
    email_verification_token: Optional[str] = Field(default=None, index=True)
    email_verification_expires: Optional[datetime] = Field(default=None)

    # Password reset and lockout
    password_reset_token: Optional[str] = Field(default=None, index=True)
    password_reset_expires: Optional[datetime] = Field(default=None)
    failed_login_attempts: int = Field(default=0)
    account_locked_until: Optional[datetime] = Field(default=None)

    # Administrative status change audit
    status_reason: Optional[str] = Field(default=None)
    status_changed_at: Optional[datetime] = Field(default=None)
    status_changed_by: Optional[str] = Field(default=None)

    # Free consultation tracking
    free_consultation_used: bool = Field(default=False)
    free_consultation_date: Optional[datetime] = Field(default=None)

    # Project submission quota
    submitter_tier: str = Field(default="BASIC")
    monthly_project_limit: int = Field(default=5)
    monthly_projects_used: int = Field(default=0)
    last_reset_date: datetime = Field(default_factory=utc_now)
    total_projects_submitted: int = Field(default=0)
    reputation_points: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        """Whether a lockout is currently in force."""
        return self.account_locked_until is not None and self.account_locked_until > (now or utc_now())

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"
