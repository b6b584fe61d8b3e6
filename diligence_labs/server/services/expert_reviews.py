"""
Expert Application Review.

Applies an admin's decision on an expert application. Approval verifies
the profile at the BRONZE tier with a starting reputation and a tier
achievement; rejection records the reviewer's notes; a request for more
information puts the application under review. Approvals and rejections
are announced to the applicant by email once the change is committed.
"""

from typing import NamedTuple, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import utc_now
from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.entities.reputation import Achievement
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.errors import NotFoundError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import (
    AchievementType,
    ApplicationAction,
    ExpertTier,
    ExpertVerificationStatus,
)
from diligence_labs.server.core.config import settings

from . import email_templates
from .activity import record_activity
from .email import EmailSender
from .email_templates import EmailTemplate

logger = get_logger(__name__)

APPROVAL_REPUTATION = 100

NEW_STATUS = {
    ApplicationAction.APPROVE: ExpertVerificationStatus.VERIFIED,
    ApplicationAction.REJECT: ExpertVerificationStatus.REJECTED,
    ApplicationAction.REQUEST_INFO: ExpertVerificationStatus.UNDER_REVIEW,
}


class ReviewOutcome(NamedTuple):
    profile: ExpertProfile
    user: User
    new_status: str
    email: Optional[EmailTemplate] = None


def _approve(session: AsyncSession, profile: ExpertProfile, user: User) -> EmailTemplate:
    profile.expert_tier = ExpertTier.BRONZE.value
    profile.reputation_points = APPROVAL_REPUTATION
    profile.verified_at = utc_now()
    user.reputation_points += APPROVAL_REPUTATION
    session.add(user)
    session.add(
        Achievement(
            user_id=user.id,
            expert_id=profile.id,
            achievement_type=AchievementType.TIER_PROMOTION.value,
            title="Verified Expert",
            description="Expert application approved at the Bronze tier",
            points_awarded=APPROVAL_REPUTATION,
        )
    )
    return email_templates.expert_approval(
        user.name or "Expert",
        profile.expert_tier,
        profile.reputation_points,
        f"{settings.app_base_url}/expert/dashboard",
    )


async def apply_review(
    session: AsyncSession,
    admin_id: str,
    expert_id: str,
    action: ApplicationAction,
    review_notes: Optional[str] = None,
) -> ReviewOutcome:
    """
    Apply a review decision to one application without committing.

    Args:
        session: Database session; the caller commits
        admin_id: Reviewing admin, recorded in the activity log
        expert_id: Expert profile under review
        action: The decision
        review_notes: Notes stored on the profile and quoted in a rejection email

    Returns:
        ReviewOutcome with the email to send once committed, if any

    Raises:
        NotFoundError: The profile or its user does not exist
    """
    profile = await session.get(ExpertProfile, expert_id)
    if profile is None:
        raise NotFoundError("Expert profile")
    user = await session.get(User, profile.user_id)
    if user is None:
        raise NotFoundError("User")

    new_status = NEW_STATUS[action].value
    profile.verification_status = new_status
    if review_notes is not None:
        profile.review_notes = review_notes

    email = None
    if action == ApplicationAction.APPROVE:
        email = _approve(session, profile, user)
    elif action == ApplicationAction.REJECT:
        email = email_templates.expert_rejection(
            user.name or "Applicant", review_notes, f"{settings.app_base_url}/expert/apply"
        )
    session.add(profile)

    record_activity(
        session,
        "EXPERT_APPLICATION_REVIEWED",
        user_id=user.id,
        admin_id=admin_id,
        expert_id=profile.id,
        decision=action.value,
        new_status=new_status,
    )
    await session.flush()
    logger.info(f"Expert application {profile.id} reviewed: {action.value} -> {new_status}")
    return ReviewOutcome(profile, user, new_status, email)


async def notify_applicant(sender: EmailSender, outcome: ReviewOutcome) -> bool:
    if outcome.email is None:
        return False
    return await sender.send(outcome.user.email, outcome.email)
