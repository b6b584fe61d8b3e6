"""
Expert Endpoints.

The public leaderboard of verified experts, and creation or update of the
caller's own expert profile (which sends it back for review).
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session
from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.repositories import ExpertProfileRepository, pagination
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import ExpertTier, ExpertVerificationStatus
from diligence_labs.core.models.io.experts import (
    ExpertProfileRead,
    ExpertProfileUpsert,
    LeaderboardEntry,
    LeaderboardResponse,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.deps import CurrentUserDep

logger = get_logger(__name__)

router = APIRouter()

SortField = Literal["reputation_points", "total_evaluations", "total_rewards", "created_at"]


@router.get(
    "",
    response_model=LeaderboardResponse,
    summary="Expert Leaderboard",
    description="List verified experts ranked by reputation, evaluations, rewards or join date.",
)
async def leaderboard(
    tier: Optional[ExpertTier] = None,
    sort_by: SortField = Query(default="reputation_points", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> LeaderboardResponse:
    """
    Expert leaderboard.

    Ranks are absolute across pages: the first entry of page 2 with a limit
    of 20 has rank 21.
    """
    skip = (page - 1) * limit
    rows, total = await ExpertProfileRepository(session).leaderboard(
        tier.value if tier else None, sort_by, order == "desc", limit, skip
    )
    experts = [
        LeaderboardEntry(
            rank=skip + index + 1,
            expert_id=profile.id,
            name=user.name,
            company=profile.company,
            position=profile.position,
            expert_tier=profile.expert_tier,
            reputation_points=profile.reputation_points,
            total_evaluations=profile.total_evaluations,
            total_rewards=profile.total_rewards,
            primary_expertise=profile.get_primary_expertise_list(),
        )
        for index, (profile, user) in enumerate(rows)
    ]
    return LeaderboardResponse(experts=experts, pagination=pagination(page, limit, total))


@router.post(
    "",
    response_model=ExpertProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create or Update Expert Profile",
    description="Create the caller's expert profile, or update it. Any update sends the profile back to review.",
    responses={200: {"description": "Profile updated"}, 201: {"description": "Profile created"}},
)
async def upsert_profile(
    payload: ExpertProfileUpsert,
    user: CurrentUserDep,
    response: Response,
    session: AsyncSession = Depends(get_session),
) -> ExpertProfileRead:
    repo = ExpertProfileRepository(session)
    profile = await repo.get_by_user_id(user.id)
    created = profile is None
    if created:
        profile = ExpertProfile(user_id=user.id)

    fields = payload.model_dump(exclude={"primary_expertise", "secondary_expertise"})
    for key, value in fields.items():
        setattr(profile, key, value)
    profile.set_primary_expertise_list(payload.primary_expertise)
    profile.set_secondary_expertise_list(payload.secondary_expertise)
    profile.verification_status = ExpertVerificationStatus.PENDING.value

    if created:
        await repo.create(profile)
    else:
        await repo.update(profile)
        response.status_code = status.HTTP_200_OK
    await session.commit()
    await session.refresh(profile)

    log_business_event("expert.profile_saved", expert_id=profile.id, is_new=created)
    return ExpertProfileRead.from_entity(profile)
