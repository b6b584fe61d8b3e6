"""
Consultation session I/O models.

Covers bookings by signed-in users, guest bookings, and the admin
session management views.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from ..domain.enums import ConsultationType, SessionStatus, Urgency
from .base import CamelModel

BookableConsultationType = Literal["STRATEGIC_ADVISORY", "DUE_DILIGENCE", "TOKENOMICS_DESIGN", "TOKEN_LAUNCH"]

# Service-specific free-text fields and the label each gets in the composed description
SERVICE_FIELD_LABELS = (
    ("business_type", "Business Type"),
    ("current_challenges", "Current Challenges"),
    ("strategic_goals", "Strategic Goals"),
    ("timeline", "Timeline"),
    ("market_focus", "Market Focus"),
    ("project_type", "Project Type"),
    ("technical_architecture", "Technical Architecture"),
    ("team_size", "Team Size"),
    ("funding_stage", "Funding Stage"),
    ("token_type", "Token Type"),
    ("token_purpose", "Token Purpose"),
    ("economic_model", "Economic Model"),
    ("total_supply", "Total Supply"),
    ("distribution_model", "Distribution Model"),
    ("stakeholders", "Stakeholders"),
    ("launch_type", "Launch Type"),
    ("launch_timeline", "Launch Timeline"),
    ("target_raise", "Target Raise"),
    ("launch_platforms", "Launch Platforms"),
    ("marketing_strategy", "Marketing Strategy"),
    ("legal_compliance", "Legal Compliance"),
    ("community_size", "Community Size"),
)


class SessionCreate(CamelModel):
    """Schema for booking a consultation as a signed-in user."""

    consultation_type: BookableConsultationType
    description: str = Field(min_length=20)
    urgency: Urgency
    contact_email: EmailStr
    duration: Literal["30", "45", "60"]

    title: Optional[str] = None
    project_name: Optional[str] = None
    business_name: Optional[str] = None
    preferred_date: Optional[str] = Field(default=None, description="ISO 8601 date or datetime")
    budget: Optional[str] = None

    business_type: Optional[str] = None
    current_challenges: Optional[str] = None
    strategic_goals: Optional[str] = None
    timeline: Optional[str] = None
    market_focus: Optional[str] = None
    project_type: Optional[str] = None
    technical_architecture: Optional[str] = None
    team_size: Optional[str] = None
    funding_stage: Optional[str] = None
    token_type: Optional[str] = None
    token_purpose: Optional[str] = None
    economic_model: Optional[str] = None
    total_supply: Optional[str] = None
    distribution_model: Optional[str] = None
    stakeholders: Optional[str] = None
    launch_type: Optional[str] = None
    launch_timeline: Optional[str] = None
    target_raise: Optional[str] = None
    launch_platforms: Optional[str] = None
    marketing_strategy: Optional[str] = None
    legal_compliance: Optional[str] = None
    community_size: Optional[str] = None


class SessionRead(CamelModel):
    id: str
    user_id: Optional[str] = None
    consultation_type: str
    description: Optional[str] = None
    status: str
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    guest_email: Optional[str] = None
    guest_name: Optional[str] = None
    guest_phone: Optional[str] = None
    is_free_consultation: bool
    created_at: datetime
    updated_at: datetime


class SessionCreateResponse(CamelModel):
    message: str
    session: SessionRead


class GuestBookingRequest(CamelModel):
    """Schema for booking a consultation without an account."""

    consultation_type: ConsultationType
    description: Optional[str] = None
    guest_email: EmailStr
    guest_name: str = Field(min_length=1)
    guest_phone: Optional[str] = None
    send_account_invite: bool = True
    is_free_consultation: bool = True


class GuestBookingResponse(CamelModel):
    message: str
    session_id: str
    account_invite_sent: bool
    existing_user: bool
    is_free_consultation: bool


class SessionUserSummary(CamelModel):
    id: str
    name: Optional[str] = None
    email: str


class AdminSessionRead(SessionRead):
    user: Optional[SessionUserSummary] = None


class AdminSessionUpdate(CamelModel):
    status: SessionStatus
    notes: Optional[str] = None
    scheduled_at: Optional[datetime] = None


class AdminSessionList(CamelModel):
    sessions: List[AdminSessionRead]
