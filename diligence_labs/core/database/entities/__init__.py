"""
Database entity models.

This package contains all database entity models organized by business domain.

Modules:
- users: Client accounts with verification, lockout and quota state
- reputation: Submitter reputation and achievements
- admins: Admin accounts, managed registration keys and staff assignments
- consultations: Consultation sessions (user and guest) and report requests
- subscriptions: Locally recorded plan subscriptions
- experts: Expert profiles and verification state
- projects: Submitted projects, expert assignments and evaluations
- rewards: Evaluation fee distributions and payouts
- activity: Activity and admin notification audit logs
"""

from . import (
    activity,
    admins,
    consultations,
    experts,
    projects,
    reputation,
    rewards,
    subscriptions,
    users,
)

__all__ = [
    "activity",
    "admins",
    "consultations",
    "experts",
    "projects",
    "reputation",
    "rewards",
    "subscriptions",
    "users",
]
