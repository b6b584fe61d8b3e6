"""
Admin Authentication Endpoints.

Admins sign up with a registration key (the static key from settings or a
managed key issued by a super admin), sign in for a bearer admin token,
and verify that token.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.admins import AdminUser
from diligence_labs.core.errors import AuthenticationError, AuthorizationError, ValidationError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import AdminRole
from diligence_labs.core.models.io.admin import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminRead,
    AdminSignupRequest,
    AdminSignupResponse,
    AdminVerifyResponse,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.core.security import (
    check_password_strength,
    create_admin_token,
    hash_password,
    verify_password,
)
from diligence_labs.server.api.v1.auth import ensure_strong_password
from diligence_labs.server.core.config import settings
from diligence_labs.server.services.admin_keys import AdminKeyService
from diligence_labs.server.services.deps import CurrentAdminDep
from diligence_labs.server.services.rate_limiter import rate_limit

logger = get_logger(__name__)

router = APIRouter()


async def get_admin_by_email(session: AsyncSession, email: str):
    result = await session.execute(select(AdminUser).where(AdminUser.email == email))
    return result.scalars().first()


@router.post(
    "/signup",
    response_model=AdminSignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Admin Signup",
    description="Create an admin account with a registration key.",
    responses={
        400: {"description": "Missing fields, weak password or email already registered"},
        403: {"description": "Invalid admin key"},
    },
)
async def admin_signup(
    payload: AdminSignupRequest,
    session: AsyncSession = Depends(get_session),
) -> AdminSignupResponse:
    """
    Register an admin.

    The key is checked first: the static registration key is always
    accepted, otherwise it must be an active managed key, whose use is
    counted.
    """
    if payload.admin_key != settings.admin_registration_key:
        validation = await AdminKeyService(session).validate(payload.admin_key)
        if not validation.valid:
            # persist the deactivation of an expired or exhausted key
            await session.commit()
            logger.warning(f"Admin signup refused for {payload.email}: {validation.reason}")
            raise AuthorizationError("Invalid admin key", details={"reason": validation.reason})

    email = payload.email.lower()
    ensure_strong_password(check_password_strength(payload.password, email))
    if await get_admin_by_email(session, email) is not None:
        raise ValidationError("Admin with this email already exists")

    admin = AdminUser(
        email=email,
        name=payload.name,
        password_hash=hash_password(payload.password),
        role=AdminRole.ADMIN.value,
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)

    log_business_event("admin.signed_up", admin_id=admin.id)
    return AdminSignupResponse(message="Admin account created successfully", admin=AdminRead.model_validate(admin))


@router.post(
    "/login",
    response_model=AdminLoginResponse,
    summary="Admin Login",
    description="Authenticate an admin and return a bearer admin token.",
    responses={401: {"description": "Invalid credentials or deactivated account"}},
    dependencies=[Depends(rate_limit)],
)
async def admin_login(
    payload: AdminLoginRequest,
    session: AsyncSession = Depends(get_session),
) -> AdminLoginResponse:
    admin = await get_admin_by_email(session, payload.email.lower())
    if admin is None or not verify_password(payload.password, admin.password_hash):
        raise AuthenticationError("Invalid credentials")
    if not admin.is_active:
        raise AuthenticationError("Admin account is deactivated")

    admin.last_login = utc_now()
    session.add(admin)
    await session.commit()
    await session.refresh(admin)

    log_business_event("admin.logged_in", admin_id=admin.id)
    token = create_admin_token(admin.id, admin.email, admin.name, admin.role)
    return AdminLoginResponse(token=token, admin=AdminRead.model_validate(admin))


@router.get(
    "/verify",
    response_model=AdminVerifyResponse,
    summary="Verify Admin Token",
    description="Check the bearer admin token and return the admin it belongs to.",
    responses={401: {"description": "Missing, invalid or expired admin token"}},
)
async def verify_admin(admin: CurrentAdminDep) -> AdminVerifyResponse:
    return AdminVerifyResponse(valid=True, admin=AdminRead.model_validate(admin))
