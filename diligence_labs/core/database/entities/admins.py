"""
Admin account, registration key and staff assignment entity models.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class AdminUser(Base, table=True):
    """Back-office account, separate from client users.

    Table: admin_users
    """

    __tablename__ = "admin_users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(unique=True, index=True)
    name: str
    password_hash: str
    role: str = Field(default="ADMIN", description="MODERATOR, ADMIN or SUPER_ADMIN")
    is_active: bool = Field(default=True)
    last_login: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"AdminUser(id={self.id}, email={self.email}, role={self.role})"


class AdminKey(Base, table=True):
    """Managed registration key allowing a new admin to sign up.

    Table: admin_keys
    """

    __tablename__ = "admin_keys"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    key: str = Field(unique=True, index=True)
    description: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)
    expires_at: Optional[datetime] = Field(default=None)
    max_usages: Optional[int] = Field(default=None)
    usage_count: int = Field(default=0)
    created_by: Optional[str] = Field(default=None, foreign_key="admin_users.id")
    last_used_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"AdminKey(id={self.id}, active={self.is_active}, usage={self.usage_count}/{self.max_usages})"


class StaffAssignment(Base, table=True):
    """Admin team member assigned to a consultation session or a report.

    ``item_type`` is ``session`` or ``report`` and ``item_id`` points at the
    matching ``sessions`` or ``reports`` row.

    Table: staff_assignments
    """

    __tablename__ = "staff_assignments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    item_type: str = Field(index=True)
    item_id: str = Field(index=True)
    assignee_id: str = Field(foreign_key="admin_users.id", index=True)
    assigned_by: Optional[str] = Field(default=None, foreign_key="admin_users.id")
    role: str = Field(default="LEAD", description="LEAD or CONTRIBUTOR")
    status: str = Field(default="ASSIGNED", index=True)
    estimated_hours: Optional[int] = Field(default=None)
    actual_hours: Optional[int] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    started_at: Optional[datetime] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"StaffAssignment(id={self.id}, item={self.item_type}:{self.item_id}, assignee={self.assignee_id})"
