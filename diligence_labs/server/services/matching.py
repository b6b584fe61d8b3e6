"""
Expert to project matching rules.

Tier compatibility gates which projects an expert may pick up; the
expertise match score ranks how well a project fits the expert's declared
areas of expertise.
"""

import math
from typing import Iterable, List, Optional

from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.entities.projects import Project
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import ExpertTier, ProjectPriority

logger = get_logger(__name__)

MAX_EXPERTS_PER_PROJECT = 3

HIGH_PRIORITIES = (ProjectPriority.HIGH.value, ProjectPriority.URGENT.value)

CATEGORY_MATCH_POINTS = 100
TECH_MATCH_POINTS = 20
BLOCKCHAIN_MATCH_POINTS = 30
MAX_MATCH_SCORE = 100

ACTIVE_ASSIGNMENT_LIMITS = {
    ExpertTier.GOLD.value: 10,
    ExpertTier.SILVER.value: 7,
}
DEFAULT_ACTIVE_ASSIGNMENT_LIMIT = 5

ASSIGNMENT_REPUTATION = {"PRIMARY": 25}
DEFAULT_ASSIGNMENT_REPUTATION = 15

SUBMISSION_REPUTATION_BASE = 25
SUBMITTER_TIER_MULTIPLIERS = {
    "BASIC": 1.0,
    "VERIFIED": 1.2,
    "PREMIUM": 1.5,
    "VC": 2.0,
    "ECOSYSTEM_PARTNER": 3.0,
}


def is_tier_compatible(tier: str, evaluation_budget: Optional[float], priority: str) -> bool:
    budget = evaluation_budget or 0
    high_priority = priority in HIGH_PRIORITIES
    if tier == ExpertTier.BRONZE.value:
        return budget <= 20000 and not high_priority
    if tier == ExpertTier.SILVER.value:
        return budget <= 50000
    if tier in (ExpertTier.GOLD.value, ExpertTier.PLATINUM.value, ExpertTier.DIAMOND.value):
        return True
    return budget <= 10000


def _matches(term: str, expertise: List[str]) -> bool:
    return any(term in entry or entry in term for entry in expertise)


def expertise_match_score(
    expertise: Iterable[str], category: Optional[str], technology_stack: Iterable[str], blockchain: Optional[str]
) -> int:
    """
    Score 0-100 for how well a project fits the expert's expertise.

    The category counts most; each matching technology and a matching
    blockchain add smaller amounts. Matching is case-insensitive and
    accepts substrings in either direction.
    """
    try:
        areas = [str(entry).lower() for entry in expertise if entry]
        score = 0
        if category and category.lower() in areas:
            score += CATEGORY_MATCH_POINTS
        for tech in technology_stack:
            if tech and _matches(str(tech).lower(), areas):
                score += TECH_MATCH_POINTS
        if blockchain and _matches(blockchain.lower(), areas):
            score += BLOCKCHAIN_MATCH_POINTS
        return min(score, MAX_MATCH_SCORE)
    except (TypeError, AttributeError) as e:
        logger.debug(f"Could not compute expertise match: {e}")
        return 0


def match_project(profile: ExpertProfile, project: Project) -> int:
    expertise = profile.get_primary_expertise_list() + profile.get_secondary_expertise_list()
    return expertise_match_score(expertise, project.category, project.get_technology_stack_list(), project.blockchain)


def available_slots(assignment_count: int) -> int:
    return max(0, MAX_EXPERTS_PER_PROJECT - assignment_count)


def evaluation_progress(submitted: int, assignment_count: int) -> int:
    if not assignment_count:
        return 0
    return round(submitted / assignment_count * 100)


def active_assignment_limit(tier: str) -> int:
    return ACTIVE_ASSIGNMENT_LIMITS.get(tier, DEFAULT_ACTIVE_ASSIGNMENT_LIMIT)


def assignment_reputation(assignment_type: str) -> int:
    return ASSIGNMENT_REPUTATION.get(assignment_type, DEFAULT_ASSIGNMENT_REPUTATION)


def submission_reputation(submitter_tier: str) -> int:
    return math.floor(SUBMISSION_REPUTATION_BASE * SUBMITTER_TIER_MULTIPLIERS.get(submitter_tier, 1.0))
