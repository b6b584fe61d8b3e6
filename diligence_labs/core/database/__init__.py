"""
Centralized database layer for Diligence Labs.

This package provides a unified location for all database entities and repositories,
organized by business domain and table relationships.

Structure:
- entities/: Database entity models organized by business domain
- repositories/: Data access layer for the entities with non-trivial queries
- session.py: Global engine and session factory management
- utils.py: Database utility functions (engine, session factory, table creation)
"""

from .base import Base, new_id, to_naive_utc, utc_now
from .session import (
    async_session_maker,
    engine,
    get_session,
    init_db,
    ping,
)
from .utils import (
    create_all,
    create_engine,
    create_sessionmaker,
)

__all__ = [
    "Base",
    "async_session_maker",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "engine",
    "get_session",
    "init_db",
    "new_id",
    "ping",
    "to_naive_utc",
    "utc_now",
]
