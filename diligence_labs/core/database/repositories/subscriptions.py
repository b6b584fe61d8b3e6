"""
Subscription repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from ..entities.subscriptions import Subscription
from ..entities.users import User
from .base import AsyncBaseRepository

CURRENT_STATUSES = ("ACTIVE", "TRIALING")


class SubscriptionRepository(AsyncBaseRepository[Subscription]):
    """Repository for subscription data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Subscription)

    async def get_current(self, user_id: str) -> Optional[Subscription]:
        """The user's most recent ACTIVE or TRIALING subscription."""
        stmt = (
            select(Subscription)
            .where((Subscription.user_id == user_id) & col(Subscription.status).in_(CURRENT_STATUSES))
            .order_by(col(Subscription.created_at).desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_for_user(self, subscription_id: str, user_id: str) -> Optional[Subscription]:
        stmt = select(Subscription).where((Subscription.id == subscription_id) & (Subscription.user_id == user_id))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def active_ending_between(self, start: datetime, end: datetime) -> List[Tuple[Subscription, User]]:
        """ACTIVE subscriptions whose period ends in ``[start, end)``, with their users."""
        stmt = (
            select(Subscription, User)
            .join(User, User.id == Subscription.user_id)
            .where(
                (Subscription.status == "ACTIVE")
                & (Subscription.current_period_end >= start)
                & (Subscription.current_period_end < end)
            )
            .order_by(col(Subscription.current_period_end).asc())
        )
        return [(row[0], row[1]) for row in (await self.session.execute(stmt)).all()]
