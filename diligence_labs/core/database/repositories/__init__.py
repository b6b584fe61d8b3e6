"""
Database repository layer using SQLModel.

This package contains the repository classes for entities whose queries
are shared between several endpoints or services.

Modules:
- base: AsyncBaseRepository and QueryBuilder utilities
- users: User lookups by email/token and reputation bookkeeping
- experts: Expert profile lookups and the leaderboard query
- projects: Project, assignment and evaluation queries
- subscriptions: Current subscription and expiry window queries
"""

from .base import AsyncBaseRepository, QueryBuilder, pagination
from .experts import ExpertProfileRepository
from .projects import ProjectRepository
from .subscriptions import SubscriptionRepository
from .users import UserRepository

__all__ = [
    "AsyncBaseRepository",
    "ExpertProfileRepository",
    "ProjectRepository",
    "QueryBuilder",
    "SubscriptionRepository",
    "UserRepository",
    "pagination",
]
