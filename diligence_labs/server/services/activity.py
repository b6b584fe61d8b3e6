"""Activity log helper shared by the expert workflow and the admin endpoints."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database.entities.activity import ActivityLog


def record_activity(
    session: AsyncSession,
    action: str,
    user_id: Optional[str] = None,
    admin_id: Optional[str] = None,
    **details: Any,
) -> ActivityLog:
    """Add an activity entry to the session; the caller commits."""
    entry = ActivityLog(user_id=user_id, admin_id=admin_id, action=action)
    entry.set_details(details)
    session.add(entry)
    return entry
