"""
Expert profile repository.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.experts import ExpertProfile
from ..entities.users import User
from .base import AsyncBaseRepository

LEADERBOARD_SORT_FIELDS = ("reputation_points", "total_evaluations", "total_rewards", "created_at")


class ExpertProfileRepository(AsyncBaseRepository[ExpertProfile]):
    """Repository for expert profile data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ExpertProfile)

    async def get_by_user_id(self, user_id: str) -> Optional[ExpertProfile]:
        stmt = select(ExpertProfile).where(ExpertProfile.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def leaderboard(
        self,
        tier: Optional[str],
        sort_by: str,
        descending: bool,
        limit: int,
        offset: int,
    ) -> Tuple[List[Tuple[ExpertProfile, User]], int]:
        """List verified experts with their users, ranked by ``sort_by``.

        Args:
            tier: Optional expert tier filter
            sort_by: One of ``LEADERBOARD_SORT_FIELDS``
            descending: Sort direction
            limit: Page size
            offset: Rows to skip

        Returns:
            Tuple of (profile, user) rows for the page and the total count
        """
        if sort_by not in LEADERBOARD_SORT_FIELDS:
            sort_by = "reputation_points"
        column = getattr(ExpertProfile, sort_by)

        stmt = (
            select(ExpertProfile, User)
            .join(User, User.id == ExpertProfile.user_id)
            .where(ExpertProfile.verification_status == "VERIFIED")
        )
        if tier:
            stmt = stmt.where(ExpertProfile.expert_tier == tier)

        total = await self.count({"verification_status": "VERIFIED", "expert_tier": tier})

        stmt = stmt.order_by(column.desc() if descending else column.asc(), ExpertProfile.id)
        stmt = stmt.offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()], total
