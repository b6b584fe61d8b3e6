"""Domain enums shared by entities, I/O models and services."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    TEAM_MEMBER = "TEAM_MEMBER"
    ADMIN = "ADMIN"


class AccountStatus(str, Enum):
    """Administrative state of a user account; only ACTIVE accounts may sign in."""

    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    RESTRICTED = "RESTRICTED"
    DISABLED = "DISABLED"


class SubmitterTier(str, Enum):
    """Project submitter tier, drives the reputation multiplier on submissions."""

    BASIC = "BASIC"
    VERIFIED = "VERIFIED"
    PREMIUM = "PREMIUM"
    VC = "VC"
    ECOSYSTEM_PARTNER = "ECOSYSTEM_PARTNER"


class AdminRole(str, Enum):
    """Admin roles ordered by privilege (see ``level``)."""

    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"

    @property
    def level(self) -> int:
        return {"MODERATOR": 1, "ADMIN": 2, "SUPER_ADMIN": 3}[self.value]


class ConsultationType(str, Enum):
    STRATEGIC_ADVISORY = "STRATEGIC_ADVISORY"
    DUE_DILIGENCE = "DUE_DILIGENCE"
    TOKENOMICS_DESIGN = "TOKENOMICS_DESIGN"
    TOKEN_LAUNCH = "TOKEN_LAUNCH"
    BLOCKCHAIN_INTEGRATION_ADVISORY = "BLOCKCHAIN_INTEGRATION_ADVISORY"


class SessionStatus(str, Enum):
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Urgency(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ReportType(str, Enum):
    DUE_DILIGENCE = "DUE_DILIGENCE"
    ADVISORY_NOTES = "ADVISORY_NOTES"
    BLOCKCHAIN_INTEGRATION_ADVISORY = "BLOCKCHAIN_INTEGRATION_ADVISORY"
    MARKET_RESEARCH = "MARKET_RESEARCH"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PlanType(str, Enum):
    FREE = "FREE"
    BASIC_MONTHLY = "BASIC_MONTHLY"
    PROFESSIONAL_MONTHLY = "PROFESSIONAL_MONTHLY"
    ENTERPRISE_MONTHLY = "ENTERPRISE_MONTHLY"


class BillingCycle(str, Enum):
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    TRIALING = "TRIALING"
    PAST_DUE = "PAST_DUE"
    CANCELED = "CANCELED"
    INCOMPLETE = "INCOMPLETE"


class ExpertVerificationStatus(str, Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class ExpertTier(str, Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"
    DIAMOND = "DIAMOND"


class ApplicationAction(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REQUEST_INFO = "REQUEST_INFO"


class AchievementType(str, Enum):
    TIER_PROMOTION = "TIER_PROMOTION"
    QUALITY_SUBMITTER = "QUALITY_SUBMITTER"


class ProjectStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    PENDING_EVALUATION = "PENDING_EVALUATION"
    EXPERT_ASSIGNMENT = "EXPERT_ASSIGNMENT"
    EVALUATION_IN_PROGRESS = "EVALUATION_IN_PROGRESS"
    EVALUATION_COMPLETE = "EVALUATION_COMPLETE"
    PUBLISHED = "PUBLISHED"
    REJECTED = "REJECTED"


class ProjectPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        return {"LOW": 0, "MEDIUM": 1, "HIGH": 2, "URGENT": 3}[self.value]


class AssignmentType(str, Enum):
    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"
    REVIEWER = "REVIEWER"


class AssignmentStatus(str, Enum):
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class StaffRole(str, Enum):
    """Role of an admin team member on a session or report; the first assignee leads."""

    LEAD = "LEAD"
    CONTRIBUTOR = "CONTRIBUTOR"


class WorkItemType(str, Enum):
    SESSION = "session"
    REPORT = "report"


class EvaluationStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Recommendation(str, Enum):
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    AVOID = "AVOID"
    STRONG_AVOID = "STRONG_AVOID"


class DistributionStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    DISTRIBUTED = "DISTRIBUTED"
    FAILED = "FAILED"


class PayoutType(str, Enum):
    EVALUATION_REWARD = "EVALUATION_REWARD"
    SUBMITTER_BONUS = "SUBMITTER_BONUS"


class PayoutStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class NotificationType(str, Enum):
    SUBSCRIPTION_STATUS = "subscription_status"
    SECURITY_ALERT = "security_alert"
    CUSTOM = "custom"
    SUBSCRIPTION_EXPIRATION = "subscription_expiration"
    ACCOUNT_STATUS = "account_status"
