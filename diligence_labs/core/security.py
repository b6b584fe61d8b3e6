"""
Security primitives.

This module groups the credential handling shared by user and admin
authentication:

- Password strength evaluation with user-facing feedback
- bcrypt password hashing
- HS256 access tokens (PyJWT) for users and admins
- Random one-time tokens for email verification, invitations and resets
"""

from __future__ import annotations

import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

import bcrypt
import jwt
from pydantic import BaseModel, Field

from diligence_labs.core.errors import AuthenticationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.server.core.config import settings

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8
JWT_ALGORITHM = "HS256"

COMMON_PASSWORDS = (
    "password",
    "password123",
    "12345678",
    "qwerty",
    "abc123",
    "admin",
    "login",
    "welcome",
    "letmein",
    "monkey",
    "dragon",
    "pass",
    "master",
)

SPECIAL_CHARACTERS = re.compile(r"[^A-Za-z0-9]")

STRENGTH_LABELS = ("Very Weak", "Weak", "Fair", "Good", "Strong")

PASSWORD_REQUIREMENTS = [
    f"At least {MIN_PASSWORD_LENGTH} characters long",
    "Contains at least one uppercase letter (A-Z)",
    "Contains at least one lowercase letter (a-z)",
    "Contains at least one number (0-9)",
    "Contains at least one special character (!@#$%^&*)",
    "Not a common password or similar to your email",
    "Strong enough to resist automated attacks",
]


# =====================================================================
# Password strength
# =====================================================================


class PasswordRequirements(BaseModel):
    min_length: bool
    has_uppercase: bool
    has_lowercase: bool
    has_numbers: bool
    has_special_chars: bool
    no_common_patterns: bool
    not_email_based: bool

    def failed(self) -> List[str]:
        return [name for name, met in self.model_dump().items() if not met]


class PasswordFeedback(BaseModel):
    warning: str = ""
    suggestions: List[str] = Field(default_factory=list)


class PasswordStrength(BaseModel):
    """Result of evaluating a candidate password."""

    score: int = Field(ge=0, le=4)
    label: str
    feedback: PasswordFeedback
    crack_time: str
    is_valid: bool
    requirements: PasswordRequirements


def _crack_time(score: int) -> str:
    if score < 2:
        return "less than a day"
    if score < 3:
        return "days"
    if score < 4:
        return "months"
    return "centuries"


def check_password_strength(password: str, email: Optional[str] = None) -> PasswordStrength:
    """Evaluate a password against the account password policy.

    One point is scored for each of length, uppercase, lowercase and digits,
    and one for special characters provided no common password is embedded;
    the score is capped at 4. A password is valid when every requirement is
    met and the score is at least 3.

    Args:
        password: Candidate password
        email: Account email; the password may not contain its local part

    Returns:
        PasswordStrength with score, feedback and per-requirement results
    """
    lowered = password.lower()
    email_local = email.split("@")[0].lower() if email else ""

    requirements = PasswordRequirements(
        min_length=len(password) >= MIN_PASSWORD_LENGTH,
        has_uppercase=re.search(r"[A-Z]", password) is not None,
        has_lowercase=re.search(r"[a-z]", password) is not None,
        has_numbers=re.search(r"\d", password) is not None,
        has_special_chars=SPECIAL_CHARACTERS.search(password) is not None,
        no_common_patterns=not any(common in lowered for common in COMMON_PASSWORDS),
        not_email_based=not (email_local and email_local in lowered),
    )

    score = 0
    if requirements.min_length:
        score += 1
    if requirements.has_uppercase:
        score += 1
    if requirements.has_lowercase:
        score += 1
    if requirements.has_numbers:
        score += 1
    if requirements.has_special_chars and requirements.no_common_patterns:
        score += 1
    score = min(score, 4)

    feedback = PasswordFeedback()
    if not requirements.min_length:
        feedback.warning = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        missing = MIN_PASSWORD_LENGTH - len(password)
        feedback.suggestions.append(f"Add {missing} more characters to meet minimum length")
    else:
        if not requirements.has_uppercase:
            feedback.suggestions.append("Add at least one uppercase letter (A-Z)")
        if not requirements.has_lowercase:
            feedback.suggestions.append("Add at least one lowercase letter (a-z)")
        if not requirements.has_numbers:
            feedback.suggestions.append("Add at least one number (0-9)")
        if not requirements.has_special_chars:
            feedback.suggestions.append("Add at least one special character (!@#$%^&*)")
        if not requirements.no_common_patterns:
            feedback.suggestions.append("Avoid common passwords and patterns")
        if not requirements.not_email_based:
            feedback.suggestions.append("Make your password different from your email address")
        if feedback.suggestions:
            feedback.warning = "Password needs improvement"
        elif score < 3:
            feedback.warning = "Password strength is too low"
            feedback.suggestions.append("Use a more complex password")

    is_valid = not requirements.failed() and score >= 3

    return PasswordStrength(
        score=score,
        label=STRENGTH_LABELS[score],
        feedback=feedback,
        crack_time=_crack_time(score),
        is_valid=is_valid,
        requirements=requirements,
    )


# =====================================================================
# Hashing
# =====================================================================


def hash_password(password: str) -> str:
    """Hash a password with bcrypt; input beyond 72 bytes is ignored by bcrypt."""
    salt = bcrypt.gensalt(rounds=settings.auth.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8")[:72], salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


# =====================================================================
# Tokens
# =====================================================================


def _encode(payload: Dict[str, Any], secret: str, expires_in: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {**payload, "iat": now, "exp": now + expires_in}
    return jwt.encode(claims, secret, algorithm=JWT_ALGORITHM)


def _decode(token: str, secret: str, expected_type: str) -> Dict[str, Any]:
    try:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid token") from e
    if claims.get("type") != expected_type:
        raise AuthenticationError("Invalid token")
    return claims


def create_access_token(user_id: str, role: str) -> str:
    """Issue a signed access token for a client user."""
    return _encode(
        {"sub": user_id, "role": role, "type": "access"},
        settings.auth.jwt_secret,
        timedelta(minutes=settings.auth.access_token_expire_minutes),
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.auth.jwt_secret, "access")


def create_admin_token(admin_id: str, email: str, name: str, role: str) -> str:
    """Issue a signed admin token carrying the admin's identity and role."""
    return _encode(
        {"adminId": admin_id, "email": email, "name": name, "role": role, "type": "admin"},
        settings.auth.admin_jwt_secret,
        timedelta(hours=settings.auth.admin_token_expire_hours),
    )


def decode_admin_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.auth.admin_jwt_secret, "admin")


def generate_verification_token() -> str:
    """Token for email verification links and account invitations."""
    return str(uuid4())


def generate_reset_token() -> str:
    return secrets.token_hex(32)
