"""
User Reputation Endpoints.

Signed-in users see their submitter reputation: points, level, tier
progression, monthly submission allowance and achievements. The
leaderboard ranks submitters by points and is public.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.reputation import UserReputation
from diligence_labs.core.database.repositories import UserRepository
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.io.reputation import (
    AchievementRead,
    LeaderboardEntry,
    LeaderboardResponse,
    MonthlyLimits,
    TierProgression,
    UserReputationResponse,
)
from diligence_labs.server.api.v1.projects import reset_monthly_usage
from diligence_labs.server.services import reputation
from diligence_labs.server.services.deps import CurrentUserDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=UserReputationResponse,
    summary="My Reputation",
    description="The caller's reputation, tier progression, monthly allowance and achievements.",
    responses={401: {"description": "Not authenticated"}},
)
async def my_reputation(user: CurrentUserDep, session: AsyncSession = Depends(get_session)) -> UserReputationResponse:
    """
    Reputation of the signed-in user.

    The reputation row is created on first access, and the monthly
    submission counter is reset when the calendar month rolled over.
    """
    repo = UserRepository(session)
    record = await repo.get_reputation(user.id)
    if record is None:
        record = UserReputation(user_id=user.id, total_points=user.reputation_points)
        session.add(record)
    if reset_monthly_usage(user, utc_now()):
        session.add(user)
    await session.commit()
    await session.refresh(record)
    await session.refresh(user)

    progression = reputation.tier_progression(user.submitter_tier, record.total_points)
    achievements = await repo.list_achievements(user.id)
    return UserReputationResponse(
        user_id=user.id,
        total_points=record.total_points,
        level=record.level,
        projects_submitted=record.projects_submitted,
        quality_projects=record.quality_projects,
        achievements=[AchievementRead.model_validate(a) for a in achievements],
        tier_progression=TierProgression(
            current_tier=user.submitter_tier,
            next_tier=progression.next_tier,
            current_points=record.total_points,
            next_tier_points=progression.next_tier_points,
            progress=progression.progress,
            thresholds=reputation.TIER_THRESHOLDS,
        ),
        monthly_limits=MonthlyLimits(
            used=user.monthly_projects_used,
            limit=user.monthly_project_limit,
            reset_date=user.last_reset_date,
        ),
    )


@router.get(
    "/leaderboard",
    response_model=LeaderboardResponse,
    summary="Reputation Leaderboard",
    description="Top submitters by reputation points with their latest achievements.",
)
async def leaderboard(session: AsyncSession = Depends(get_session)) -> LeaderboardResponse:
    repo = UserRepository(session)
    rows = await repo.leaderboard(reputation.LEADERBOARD_SIZE)
    entries = []
    for rank, (record, user) in enumerate(rows, start=1):
        recent = await repo.list_achievements(user.id, limit=reputation.LEADERBOARD_ACHIEVEMENTS)
        entries.append(
            LeaderboardEntry(
                rank=rank,
                user_id=user.id,
                name=user.name,
                submitter_tier=user.submitter_tier,
                total_points=record.total_points,
                level=record.level,
                recent_achievements=[AchievementRead.model_validate(a) for a in recent],
            )
        )
    return LeaderboardResponse(leaderboard=entries)
