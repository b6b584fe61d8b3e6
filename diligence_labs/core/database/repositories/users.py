"""
User repository.

Lookups by email and by the one-time tokens stored on the account, plus
the reputation bookkeeping shared by project submission and reward
distribution.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from ..entities.reputation import Achievement, UserReputation
from ..entities.users import User
from .base import AsyncBaseRepository


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user account data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email, case-insensitively."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_verification_token(self, token: str, now: datetime) -> Optional[User]:
        """Get the user owning an unexpired email verification token."""
        stmt = select(User).where(
            (User.email_verification_token == token) & (User.email_verification_expires > now)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_reset_token(self, token: str, now: datetime) -> Optional[User]:
        """Get the user owning an unexpired password reset token."""
        stmt = select(User).where((User.password_reset_token == token) & (User.password_reset_expires > now))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_reputation(self, user_id: str) -> Optional[UserReputation]:
        stmt = select(UserReputation).where(UserReputation.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_submission_reputation(self, user: User, points: int) -> UserReputation:
        """Credit points for a project submission.

        Creates the reputation row on the first submission and bumps the
        submission counter; the user's own reputation total is updated too.
        """
        reputation = await self.get_reputation(user.id)
        if reputation is None:
            reputation = UserReputation(user_id=user.id, total_points=points, level=1, projects_submitted=1)
        else:
            reputation.total_points += points
            reputation.projects_submitted += 1
        self.session.add(reputation)
        user.reputation_points += points
        self.session.add(user)
        await self.session.flush()
        return reputation

    async def add_quality_reputation(self, user: User, points: int) -> UserReputation:
        """Credit points for a high-scoring project.

        A reputation row created here starts at level ``points // 100 + 1``.
        """
        reputation = await self.get_reputation(user.id)
        if reputation is None:
            reputation = UserReputation(
                user_id=user.id,
                total_points=points,
                level=points // 100 + 1,
                quality_projects=1,
            )
        else:
            reputation.total_points += points
            reputation.quality_projects += 1
        self.session.add(reputation)
        user.reputation_points += points
        self.session.add(user)
        await self.session.flush()
        return reputation

    async def list_achievements(self, user_id: str, limit: Optional[int] = None) -> List[Achievement]:
        """Achievements of a user, most recent first."""
        stmt = select(Achievement).where(Achievement.user_id == user_id).order_by(col(Achievement.created_at).desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def leaderboard(self, limit: int) -> List[Tuple[UserReputation, User]]:
        """Reputation rows joined with their users, highest total first."""
        stmt = (
            select(UserReputation, User)
            .join(User, User.id == UserReputation.user_id)
            .order_by(col(UserReputation.total_points).desc(), col(UserReputation.created_at))
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).all()
        return [(reputation, user) for reputation, user in rows]
