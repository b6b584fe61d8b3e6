"""Admin dashboard statistics endpoint."""

from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from diligence_labs.core.database import get_session
from diligence_labs.core.database.entities.consultations import ConsultationSession, Report
from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.entities.projects import Project
from diligence_labs.core.database.entities.rewards import ExpertPayout
from diligence_labs.core.database.entities.subscriptions import Subscription
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.models.domain.enums import ExpertVerificationStatus, SubscriptionStatus
from diligence_labs.core.models.io.admin import AdminStats
from diligence_labs.server.services.deps import ModeratorDep

router = APIRouter()


async def _count_by_status(session: AsyncSession, model) -> Dict[str, int]:
    stmt = select(model.status, func.count()).group_by(model.status)
    return {status: int(count) for status, count in (await session.execute(stmt)).all()}


async def _scalar(session: AsyncSession, stmt) -> float:
    return (await session.execute(stmt)).scalar_one() or 0


@router.get(
    "",
    response_model=AdminStats,
    summary="Dashboard Statistics",
    description="Platform-wide counts for the admin dashboard.",
)
async def admin_stats(admin: ModeratorDep, session: AsyncSession = Depends(get_session)) -> AdminStats:
    return AdminStats(
        total_users=int(await _scalar(session, select(func.count()).select_from(User))),
        sessions_by_status=await _count_by_status(session, ConsultationSession),
        reports_by_status=await _count_by_status(session, Report),
        active_subscriptions=int(
            await _scalar(
                session,
                select(func.count())
                .select_from(Subscription)
                .where(Subscription.status == SubscriptionStatus.ACTIVE.value),
            )
        ),
        projects_by_status=await _count_by_status(session, Project),
        verified_experts=int(
            await _scalar(
                session,
                select(func.count())
                .select_from(ExpertProfile)
                .where(ExpertProfile.verification_status == ExpertVerificationStatus.VERIFIED.value),
            )
        ),
        total_rewards_distributed=float(await _scalar(session, select(func.sum(ExpertPayout.amount)))),
    )
