"""Admin subscription listing endpoint."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session
from diligence_labs.core.database.entities.subscriptions import Subscription
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.models.domain.enums import SubscriptionStatus
from diligence_labs.core.models.io.subscriptions import AdminSubscriptionRead
from diligence_labs.server.services.deps import ModeratorDep

router = APIRouter()


@router.get(
    "",
    response_model=List[AdminSubscriptionRead],
    summary="List All Subscriptions",
    description="List subscriptions, newest first, with the subscriber's email and name.",
)
async def list_subscriptions(
    admin: ModeratorDep,
    subscription_status: Optional[SubscriptionStatus] = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_session),
) -> List[AdminSubscriptionRead]:
    stmt = select(Subscription, User).join(User, User.id == Subscription.user_id)
    if subscription_status:
        stmt = stmt.where(Subscription.status == subscription_status.value)
    stmt = stmt.order_by(col(Subscription.created_at).desc())
    rows = (await session.execute(stmt)).all()
    return [
        AdminSubscriptionRead(
            **AdminSubscriptionRead.model_validate(sub).model_dump(exclude={"user_email", "user_name"}),
            user_email=user.email,
            user_name=user.name,
        )
        for sub, user in rows
    ]
