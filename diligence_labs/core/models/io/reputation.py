"""
Submitter reputation I/O models.
"""

from datetime import datetime
from typing import Dict, List, Optional

from .base import CamelModel


class AchievementRead(CamelModel):
    id: str
    achievement_type: str
    title: str
    description: Optional[str] = None
    points_awarded: int
    created_at: datetime


class TierProgression(CamelModel):
    current_tier: str
    next_tier: Optional[str] = None
    current_points: int
    next_tier_points: Optional[int] = None
    progress: float
    thresholds: Dict[str, int]


class MonthlyLimits(CamelModel):
    used: int
    limit: int
    reset_date: datetime


class UserReputationResponse(CamelModel):
    user_id: str
    total_points: int
    level: int
    projects_submitted: int
    quality_projects: int
    achievements: List[AchievementRead]
    tier_progression: TierProgression
    monthly_limits: MonthlyLimits


class LeaderboardEntry(CamelModel):
    rank: int
    user_id: str
    name: Optional[str] = None
    submitter_tier: str
    total_points: int
    level: int
    recent_achievements: List[AchievementRead]


class LeaderboardResponse(CamelModel):
    leaderboard: List[LeaderboardEntry]
