"""
Consultation session and report request entity models.

A consultation session is booked either by a signed-in user or by a guest;
guest bookings carry the guest's contact details, the fraud-prevention
client fingerprint and, when an account invitation was sent, the
invitation token.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class ConsultationSession(Base, table=True):
    """Booked consultation.

    Table: sessions
    """

    __tablename__ = "sessions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    consultation_type: str
    description: Optional[str] = Field(default=None)
    status: str = Field(default="PENDING", index=True)
    scheduled_at: Optional[datetime] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)
    duration_minutes: Optional[int] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    # Guest booking details
    guest_email: Optional[str] = Field(default=None, index=True)
    guest_name: Optional[str] = Field(default=None)
    guest_phone: Optional[str] = Field(default=None)
    is_free_consultation: bool = Field(default=False)
    client_ip_address: Optional[str] = Field(default=None, index=True)
    client_fingerprint: Optional[str] = Field(default=None, index=True)
    account_creation_token: Optional[str] = Field(default=None, unique=True)
    account_creation_token_expires: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"ConsultationSession(id={self.id}, type={self.consultation_type}, status={self.status})"


class Report(Base, table=True):
    """Requested research or due-diligence report.

    Table: reports
    """

    __tablename__ = "reports"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    type: str
    title: str
    description: str
    status: str = Field(default="PENDING", index=True)
    file_url: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Report(id={self.id}, type={self.type}, status={self.status})"
