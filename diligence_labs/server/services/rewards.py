"""
Reward Distribution Math.

A project's evaluation fee is split between the platform, the pool shared
by the evaluating experts, and a bonus for the submitter of a high-scoring
project. Each expert's share of the pool is scaled by a quality multiplier.
"""

import math
from typing import Iterable, NamedTuple, Optional

from diligence_labs.core.models.domain.enums import ExpertTier

PLATFORM_SHARE = 0.30
EXPERT_POOL_SHARE = 0.65
SUBMITTER_BONUS_SHARE = 0.05

HIGH_SCORE_THRESHOLD = 8.0
HIGH_SCORE_BONUS = 0.2
DETAILED_COMMENT_LENGTH = 100
DETAILED_SECTIONS_REQUIRED = 4
DETAIL_BONUS = 0.15

TIER_BONUS = {
    ExpertTier.DIAMOND.value: 0.25,
    ExpertTier.PLATINUM.value: 0.25,
    ExpertTier.GOLD.value: 0.15,
    ExpertTier.SILVER.value: 0.05,
}

EXPERT_REPUTATION_PER_UNIT = 10
SUBMITTER_REPUTATION_PER_UNIT = 20


class FeeSplit(NamedTuple):
    total_fee: float
    platform_fee: float
    expert_pool: float
    submitter_bonus: float


def split_fee(total_fee: float) -> FeeSplit:
    return FeeSplit(
        total_fee=total_fee,
        platform_fee=total_fee * PLATFORM_SHARE,
        expert_pool=total_fee * EXPERT_POOL_SHARE,
        submitter_bonus=total_fee * SUBMITTER_BONUS_SHARE,
    )


def base_reward(expert_pool: float, evaluations: int) -> float:
    return expert_pool / evaluations if evaluations else 0.0


def quality_multiplier(overall_score: Optional[float], section_comments: Iterable[Optional[str]], tier: str) -> float:
    """
    Multiplier applied to an expert's base reward.

    Starts at 1.0; high overall scores, detailed section comments and
    higher expert tiers each add a bonus.
    """
    multiplier = 1.0
    if overall_score is not None and overall_score >= HIGH_SCORE_THRESHOLD:
        multiplier += HIGH_SCORE_BONUS
    detailed = sum(1 for comment in section_comments if comment and len(comment) > DETAILED_COMMENT_LENGTH)
    if detailed >= DETAILED_SECTIONS_REQUIRED:
        multiplier += DETAIL_BONUS
    multiplier += TIER_BONUS.get(tier, 0.0)
    return round(multiplier, 4)


def qualifies_for_submitter_bonus(project_score: Optional[float]) -> bool:
    return project_score is not None and project_score >= HIGH_SCORE_THRESHOLD


def expert_reputation(payout: float) -> int:
    return math.floor(payout * EXPERT_REPUTATION_PER_UNIT)


def submitter_reputation(bonus: float) -> int:
    return math.floor(bonus * SUBMITTER_REPUTATION_PER_UNIT)
