"""
Reward Distribution Endpoints.

Admins distribute a project's evaluation fee to the experts whose
evaluations were approved and, for high-scoring projects, to the
submitter. Users can browse the distributions that concern them.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.entities.projects import Project
from diligence_labs.core.database.entities.reputation import Achievement
from diligence_labs.core.database.entities.rewards import ExpertPayout, RewardDistribution
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.database.repositories import ProjectRepository, UserRepository, pagination
from diligence_labs.core.errors import NotFoundError, ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import (
    AchievementType,
    DistributionStatus,
    EvaluationStatus,
    PayoutStatus,
    PayoutType,
    ProjectStatus,
)
from diligence_labs.core.models.io.rewards import (
    DistributeRewardsRequest,
    DistributeRewardsResponse,
    DistributionHistoryResponse,
    DistributionRead,
    DistributionSummary,
    PayoutRead,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services import rewards
from diligence_labs.server.services.deps import AdminDep, CallerDep

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/distribute",
    response_model=DistributeRewardsResponse,
    summary="Distribute Rewards",
    description="Split a project's evaluation fee between the platform, the approved experts and the submitter.",
    responses={
        400: {"description": "Project has no approved evaluations"},
        404: {"description": "Project not found"},
    },
)
async def distribute_rewards(
    payload: DistributeRewardsRequest,
    admin: AdminDep,
    session: AsyncSession = Depends(get_session),
) -> DistributeRewardsResponse:
    """
    Distribute rewards for a project.

    - 30% goes to the platform, 65% to the expert pool, 5% is reserved
      for the submitter bonus.
    - Each approved evaluation earns an equal share of the pool scaled by
      its quality multiplier, plus ``floor(payout x 10)`` reputation.
    - The submitter bonus is paid only when the project scored 8.0 or
      more, with ``floor(bonus x 20)`` submitter reputation.
    - The project is PUBLISHED afterwards.
    """
    repo = ProjectRepository(session)
    project = await repo.get_by_id(payload.project_id)
    if project is None:
        raise NotFoundError("Project")

    evaluations = await repo.list_evaluations(project.id, [EvaluationStatus.APPROVED.value])
    if not evaluations:
        raise ValidationError("Project has no approved evaluations")

    split = rewards.split_fee(payload.total_fee)
    distribution = RewardDistribution(
        project_id=project.id,
        total_fee=split.total_fee,
        platform_fee=split.platform_fee,
        expert_pool=split.expert_pool,
        submitter_bonus=split.submitter_bonus,
        status=DistributionStatus.PROCESSING.value,
        distributed_by=admin.id,
    )
    session.add(distribution)
    await session.flush()

    base = rewards.base_reward(split.expert_pool, len(evaluations))
    total_expert_rewards = 0.0
    experts_rewarded = 0
    for evaluation in evaluations:
        profile = await session.get(ExpertProfile, evaluation.expert_id)
        if profile is None:
            logger.warning(f"Skipping evaluation {evaluation.id}: expert profile {evaluation.expert_id} missing")
            continue

        multiplier = rewards.quality_multiplier(
            evaluation.overall_score, evaluation.section_comments(), profile.expert_tier
        )
        amount = base * multiplier
        session.add(
            ExpertPayout(
                distribution_id=distribution.id,
                user_id=profile.user_id,
                expert_id=profile.id,
                evaluation_id=evaluation.id,
                payout_type=PayoutType.EVALUATION_REWARD.value,
                amount=amount,
                multiplier=multiplier,
                status=PayoutStatus.PENDING.value,
            )
        )
        profile.total_rewards += amount
        profile.monthly_evaluations += 1
        profile.reputation_points += rewards.expert_reputation(amount)
        session.add(profile)

        total_expert_rewards += amount
        experts_rewarded += 1

    submitter_paid = False
    if rewards.qualifies_for_submitter_bonus(project.overall_score):
        submitter = await session.get(User, project.submitter_id)
        if submitter is not None:
            points = rewards.submitter_reputation(split.submitter_bonus)
            session.add(
                ExpertPayout(
                    distribution_id=distribution.id,
                    user_id=submitter.id,
                    payout_type=PayoutType.SUBMITTER_BONUS.value,
                    amount=split.submitter_bonus,
                    status=PayoutStatus.PENDING.value,
                )
            )
            await UserRepository(session).add_quality_reputation(submitter, points)
            session.add(
                Achievement(
                    user_id=submitter.id,
                    achievement_type=AchievementType.QUALITY_SUBMITTER.value,
                    title="Quality Submitter",
                    description=f"Submitted {project.name}, rated {project.overall_score:.1f}/10 by experts",
                    points_awarded=points,
                )
            )
            submitter_paid = True

    distribution.status = DistributionStatus.DISTRIBUTED.value
    distribution.distributed_at = utc_now()
    project.status = ProjectStatus.PUBLISHED.value
    session.add(distribution)
    session.add(project)
    await session.commit()

    log_business_event(
        "rewards.distributed",
        project_id=project.id,
        distribution_id=distribution.id,
        experts_rewarded=experts_rewarded,
        submitter_bonus_paid=submitter_paid,
    )
    return DistributeRewardsResponse(
        message="Rewards distributed successfully",
        distribution=DistributionSummary(
            total_fee=split.total_fee,
            platform_fee=split.platform_fee,
            expert_pool=split.expert_pool,
            submitter_bonus=split.submitter_bonus if submitter_paid else 0.0,
            experts_rewarded=experts_rewarded,
            total_expert_rewards=total_expert_rewards,
        ),
        reward_distribution_id=distribution.id,
    )


async def _payouts_by_distribution(session: AsyncSession, ids: List[str]) -> Dict[str, List[PayoutRead]]:
    grouped: Dict[str, List[PayoutRead]] = {i: [] for i in ids}
    if not ids:
        return grouped
    stmt = select(ExpertPayout).where(col(ExpertPayout.distribution_id).in_(ids))
    for payout in (await session.execute(stmt)).scalars().all():
        grouped[payout.distribution_id].append(PayoutRead.model_validate(payout))
    return grouped


@router.get(
    "/distribute",
    response_model=DistributionHistoryResponse,
    summary="Distribution History",
    description="Admins see every distribution; users see those for their projects or paying them.",
)
async def distribution_history(
    caller: CallerDep,
    project_id: Optional[str] = Query(default=None, alias="projectId"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> DistributionHistoryResponse:
    conditions = []
    if project_id:
        conditions.append(RewardDistribution.project_id == project_id)
    if not caller.is_admin:
        user_id = caller.user.id
        submitted = select(Project.id).where(Project.submitter_id == user_id)
        paid = select(ExpertPayout.distribution_id).where(ExpertPayout.user_id == user_id)
        conditions.append(
            or_(col(RewardDistribution.project_id).in_(submitted), col(RewardDistribution.id).in_(paid))
        )

    stmt = (
        select(RewardDistribution)
        .where(*conditions)
        .order_by(col(RewardDistribution.created_at).desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    count_stmt = select(func.count()).select_from(RewardDistribution).where(*conditions)
    distributions = list((await session.execute(stmt)).scalars().all())
    total = int((await session.execute(count_stmt)).scalar_one())

    payouts = await _payouts_by_distribution(session, [d.id for d in distributions])
    items = [
        DistributionRead(**DistributionRead.model_validate(d).model_dump(exclude={"payouts"}), payouts=payouts[d.id])
        for d in distributions
    ]
    return DistributionHistoryResponse(distributions=items, pagination=pagination(page, limit, total))
