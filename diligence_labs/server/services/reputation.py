"""
Submitter tier progression.

A submitter's tier is unlocked by reputation points; progress is the share
of the way from the current tier's threshold to the next one.
"""

from typing import Dict, NamedTuple, Optional

from diligence_labs.core.models.domain.enums import SubmitterTier

TIER_THRESHOLDS: Dict[str, int] = {
    SubmitterTier.BASIC.value: 0,
    SubmitterTier.VERIFIED.value: 100,
    SubmitterTier.PREMIUM.value: 500,
    SubmitterTier.VC.value: 2000,
    SubmitterTier.ECOSYSTEM_PARTNER.value: 5000,
}

LEADERBOARD_SIZE = 50
LEADERBOARD_ACHIEVEMENTS = 3


class Progression(NamedTuple):
    next_tier: Optional[str]
    next_tier_points: Optional[int]
    progress: float


def tier_progression(tier: str, points: int) -> Progression:
    """Next tier, its threshold and the 0-100 progress towards it."""
    tiers = list(TIER_THRESHOLDS)
    if tier not in TIER_THRESHOLDS:
        tier = SubmitterTier.BASIC.value
    index = tiers.index(tier)
    if index == len(tiers) - 1:
        return Progression(None, None, 100.0)

    next_tier = tiers[index + 1]
    floor, ceiling = TIER_THRESHOLDS[tier], TIER_THRESHOLDS[next_tier]
    progress = (points - floor) / (ceiling - floor) * 100
    return Progression(next_tier, ceiling, round(min(100.0, max(0.0, progress)), 2))
