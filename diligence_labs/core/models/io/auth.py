"""
Authentication I/O models for API requests and responses.

This module contains the schemas for user registration, email
verification, password recovery, login and account invitations.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import EmailStr, Field

from .base import CamelModel


class UserRead(CamelModel):
    """Public view of a user account."""

    id: str
    name: Optional[str] = None
    email: str
    role: str
    account_status: str
    email_verified: Optional[datetime] = None
    submitter_tier: str
    reputation_points: int
    created_at: datetime


class RegisterRequest(CamelModel):
    name: str = Field(min_length=2, description="Display name")
    email: EmailStr = Field(description="Login email; stored lowercased")
    password: str = Field(min_length=8, description="Password meeting the strength policy")


class RegisterResponse(CamelModel):
    message: str
    user: UserRead
    email_verification_sent: bool


class EmailRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class PasswordStrengthRequest(CamelModel):
    password: str
    email: Optional[str] = None


class PasswordStrengthResponse(CamelModel):
    score: int
    label: str
    is_valid: bool
    crack_time: str
    warning: str
    suggestions: List[str]
    requirements: Dict[str, bool]
    requirement_list: List[str]


class CreateFromInvitationRequest(CamelModel):
    token: str = Field(min_length=1, description="Invitation token from the guest booking email")
    password: str = Field(min_length=8)
    name: Optional[str] = Field(default=None, min_length=2)


class MessageResponse(CamelModel):
    message: str
