"""
API Dependencies.

Authentication and shared service dependencies for the API endpoints.
User routes take a bearer access token; admin routes take a bearer admin
token signed with the admin secret and gate on the admin role hierarchy.
"""

from typing import Annotated, Callable, NamedTuple, Optional, Tuple

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session
from diligence_labs.core.database.entities.admins import AdminUser
from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.database.repositories import ExpertProfileRepository
from diligence_labs.core.errors import AuthenticationError, AuthorizationError
from diligence_labs.core.models.domain.enums import AdminRole
from diligence_labs.core.security import decode_access_token, decode_admin_token

from .email import EmailSender, get_email_sender

bearer_scheme = HTTPBearer(auto_error=False)

Credentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


async def get_optional_user(
    credentials: Credentials,
    session: AsyncSession = Depends(get_session),
) -> Optional[User]:
    """The authenticated user, or None when no bearer token was sent."""
    if credentials is None:
        return None
    claims = decode_access_token(credentials.credentials)
    user = await session.get(User, claims.get("sub"))
    if user is None:
        raise AuthenticationError("User not found")
    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationError()
    return user


async def get_current_admin(
    credentials: Credentials,
    session: AsyncSession = Depends(get_session),
) -> AdminUser:
    if credentials is None:
        raise AuthenticationError("Admin authentication required")
    claims = decode_admin_token(credentials.credentials)
    admin = await session.get(AdminUser, claims.get("adminId"))
    if admin is None or not admin.is_active:
        raise AuthenticationError("Admin account not found or deactivated")
    return admin


def role_level(role: str) -> int:
    try:
        return AdminRole(role).level
    except ValueError:
        return 0


def require_admin(min_role: AdminRole) -> Callable:
    """
    Build a dependency admitting admins at or above ``min_role``.

    Args:
        min_role: Lowest admin role allowed through

    Returns:
        Dependency callable resolving to the authenticated AdminUser
    """

    async def _dependency(admin: AdminUser = Depends(get_current_admin)) -> AdminUser:
        if role_level(admin.role) < min_role.level:
            raise AuthorizationError(f"{min_role.value} role required")
        return admin

    return _dependency


class Caller(NamedTuple):
    user: Optional[User] = None
    admin: Optional[AdminUser] = None

    @property
    def is_admin(self) -> bool:
        return self.admin is not None


async def get_user_or_admin(
    credentials: Credentials,
    session: AsyncSession = Depends(get_session),
) -> Caller:
    """Accept either an admin token or a user access token."""
    if credentials is None:
        raise AuthenticationError()
    try:
        claims = decode_admin_token(credentials.credentials)
    except AuthenticationError:
        claims = decode_access_token(credentials.credentials)
        user = await session.get(User, claims.get("sub"))
        if user is None:
            raise AuthenticationError("User not found")
        return Caller(user=user)
    admin = await session.get(AdminUser, claims.get("adminId"))
    if admin is None or not admin.is_active:
        raise AuthenticationError("Admin account not found or deactivated")
    return Caller(admin=admin)


async def get_verified_expert(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> Tuple[User, ExpertProfile]:
    profile = await ExpertProfileRepository(session).get_by_user_id(user.id)
    if profile is None or not profile.is_verified:
        raise AuthorizationError("Verified expert profile required")
    return user, profile


CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[Optional[User], Depends(get_optional_user)]
CurrentAdminDep = Annotated[AdminUser, Depends(get_current_admin)]
ModeratorDep = Annotated[AdminUser, Depends(require_admin(AdminRole.MODERATOR))]
AdminDep = Annotated[AdminUser, Depends(require_admin(AdminRole.ADMIN))]
SuperAdminDep = Annotated[AdminUser, Depends(require_admin(AdminRole.SUPER_ADMIN))]
CallerDep = Annotated[Caller, Depends(get_user_or_admin)]
VerifiedExpertDep = Annotated[Tuple[User, ExpertProfile], Depends(get_verified_expert)]
EmailSenderDep = Annotated[EmailSender, Depends(get_email_sender)]
