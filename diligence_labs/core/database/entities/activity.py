"""
Audit log entity models.

``ActivityLog`` records user and admin actions (assignments, application
reviews); ``AdminNotificationLog`` records every email an admin sends or
schedules to a user, and is used to de-duplicate expiry reminders.
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class ActivityLog(Base, table=True):
    """Table: activity_logs"""

    __tablename__ = "activity_logs"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    admin_id: Optional[str] = Field(default=None, foreign_key="admin_users.id", index=True)
    action: str = Field(index=True)
    details: str = Field(default="{}", description="JSON object with action-specific details")

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def get_details(self) -> Dict[str, Any]:
        try:
            return json.loads(self.details) if self.details else {}
        except (json.JSONDecodeError, TypeError):
            return {}

    def set_details(self, details: Dict[str, Any]) -> None:
        self.details = json.dumps(details, default=str)


class AdminNotificationLog(Base, table=True):
    """Table: admin_notification_logs"""

    __tablename__ = "admin_notification_logs"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    admin_id: Optional[str] = Field(default=None, foreign_key="admin_users.id")
    notification_type: str = Field(index=True)
    subject: str
    recipient_email: str
    days_remaining: Optional[int] = Field(default=None, description="Set on subscription expiry reminders")
    success: bool = Field(default=True)
    details: str = Field(default="{}")

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def get_details(self) -> Dict[str, Any]:
        try:
            return json.loads(self.details) if self.details else {}
        except (json.JSONDecodeError, TypeError):
            return {}

    def set_details(self, details: Dict[str, Any]) -> None:
        self.details = json.dumps(details, default=str)
