"""
User Authentication Endpoints.

Registration with email verification, credential login with account
lockout, password recovery, password strength checks, and turning a guest
booking invitation into a full account.
"""

from datetime import timedelta

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from diligence_labs.core.database import get_session, utc_now
from diligence_labs.core.database.entities.consultations import ConsultationSession
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.database.repositories import UserRepository
from diligence_labs.core.errors import (
    AccountLockedError,
    AuthenticationError,
    AuthorizationError,
    DiligenceError,
    NotFoundError,
    ValidationError,
)
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.domain.enums import AccountStatus, UserRole
from diligence_labs.core.models.io.auth import (
    CreateFromInvitationRequest,
    EmailRequest,
    LoginRequest,
    MessageResponse,
    PasswordStrengthRequest,
    PasswordStrengthResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenResponse,
    UserRead,
)
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.core.security import (
    PASSWORD_REQUIREMENTS,
    PasswordStrength,
    check_password_strength,
    create_access_token,
    generate_reset_token,
    generate_verification_token,
    hash_password,
    verify_password,
)
from diligence_labs.server.core.config import settings
from diligence_labs.server.services import email_templates
from diligence_labs.server.services.deps import CurrentUserDep, EmailSenderDep
from diligence_labs.server.services.rate_limiter import rate_limit

logger = get_logger(__name__)

router = APIRouter()

VERIFICATION_TTL = timedelta(hours=24)
RESET_TTL = timedelta(hours=1)
MAX_FAILED_ATTEMPTS = 5
LOCK_DURATION = timedelta(minutes=30)

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, we have sent a password reset link."

STATUS_MESSAGES = {
    AccountStatus.SUSPENDED.value: "Your account has been suspended. Please contact support for assistance.",
    AccountStatus.RESTRICTED.value: "Your account has been restricted. Please contact support for assistance.",
    AccountStatus.DISABLED.value: "Your account has been disabled. Please contact support for assistance.",
}


def ensure_strong_password(strength: PasswordStrength) -> None:
    if strength.is_valid:
        return
    raise ValidationError(
        "Password does not meet security requirements",
        details={
            "passwordStrength": {
                "score": strength.score,
                "feedback": strength.feedback.model_dump(),
                "failedRequirements": strength.requirements.failed(),
            }
        },
    )


def _verification_url(token: str) -> str:
    return f"{settings.app_base_url}/verify-email?token={token}"


def _reset_url(token: str) -> str:
    return f"{settings.app_base_url}/reset-password?token={token}"


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Account",
    description="Create a user account and send an email verification link.",
    responses={400: {"description": "Weak password or email already registered"}},
    dependencies=[Depends(rate_limit)],
)
async def register(
    payload: RegisterRequest,
    sender: EmailSenderDep,
    session: AsyncSession = Depends(get_session),
) -> RegisterResponse:
    """
    Register a new user.

    The password must pass the strength policy. The account starts ACTIVE
    with an unverified email; the verification link is valid for 24 hours.
    """
    email = payload.email.lower()
    ensure_strong_password(check_password_strength(payload.password, email))

    users = UserRepository(session)
    if await users.get_by_email(email) is not None:
        raise ValidationError("User with this email already exists")

    token = generate_verification_token()
    user = await users.create(
        User(
            name=payload.name,
            email=email,
            password_hash=hash_password(payload.password),
            role=UserRole.USER.value,
            account_status=AccountStatus.ACTIVE.value,
            email_verification_token=token,
            email_verification_expires=utc_now() + VERIFICATION_TTL,
        )
    )
    await session.commit()
    await session.refresh(user)

    sent = await sender.send(email, email_templates.email_verification(_verification_url(token), user.name or "User"))
    log_business_event("user.registered", user_id=user.id, verification_sent=sent)

    return RegisterResponse(
        message="User created successfully. Please check your email to verify your account.",
        user=UserRead.model_validate(user),
        email_verification_sent=sent,
    )


@router.get(
    "/verify-email",
    response_model=MessageResponse,
    summary="Verify Email",
    description="Confirm an email address using the token from the verification email.",
    responses={400: {"description": "Invalid or expired token"}},
)
async def verify_email(token: str, session: AsyncSession = Depends(get_session)) -> MessageResponse:
    user = await UserRepository(session).get_by_verification_token(token, utc_now())
    if user is None:
        raise ValidationError("Invalid or expired verification token")

    user.email_verified = utc_now()
    user.email_verification_token = None
    user.email_verification_expires = None
    session.add(user)
    await session.commit()
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/verify-email",
    response_model=MessageResponse,
    summary="Resend Verification Email",
    description="Issue a fresh verification token and email it to the user.",
    responses={
        400: {"description": "Email already verified"},
        404: {"description": "User not found"},
        500: {"description": "Email could not be sent"},
    },
)
async def resend_verification(
    payload: EmailRequest,
    sender: EmailSenderDep,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    user = await UserRepository(session).get_by_email(payload.email)
    if user is None:
        raise NotFoundError("User")
    if user.email_verified is not None:
        raise ValidationError("Email is already verified")

    token = generate_verification_token()
    user.email_verification_token = token
    user.email_verification_expires = utc_now() + VERIFICATION_TTL
    session.add(user)
    await session.commit()

    template = email_templates.email_verification(_verification_url(token), user.name or "User")
    if not await sender.send(user.email, template):
        raise DiligenceError("Failed to send verification email")
    return MessageResponse(message="Verification email sent")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request Password Reset",
    description="Email a password reset link. The response is the same whether or not the account exists.",
    dependencies=[Depends(rate_limit)],
)
async def forgot_password(
    payload: EmailRequest,
    sender: EmailSenderDep,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    user = await UserRepository(session).get_by_email(payload.email)
    if user is not None:
        token = generate_reset_token()
        user.password_reset_token = token
        user.password_reset_expires = utc_now() + RESET_TTL
        session.add(user)
        await session.commit()
        await sender.send(user.email, email_templates.password_reset(_reset_url(token), user.name or "User"))
        log_business_event("user.password_reset_requested", user_id=user.id)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset Password",
    description="Set a new password using a reset token. Clears any lockout.",
    responses={400: {"description": "Invalid token or weak password"}},
)
async def reset_password(
    payload: ResetPasswordRequest,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    user = await UserRepository(session).get_by_reset_token(payload.token, utc_now())
    if user is None:
        raise ValidationError("Invalid or expired reset token")
    ensure_strong_password(check_password_strength(payload.password, user.email))

    user.password_hash = hash_password(payload.password)
    user.password_reset_token = None
    user.password_reset_expires = None
    user.failed_login_attempts = 0
    user.account_locked_until = None
    session.add(user)
    await session.commit()
    log_business_event("user.password_reset", user_id=user.id)
    return MessageResponse(message="Password has been reset successfully")


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login",
    description="Exchange email and password for a bearer access token.",
    responses={
        401: {"description": "Invalid credentials"},
        403: {"description": "Account not active"},
        423: {"description": "Account locked"},
    },
    dependencies=[Depends(rate_limit)],
)
async def login(
    payload: LoginRequest,
    sender: EmailSenderDep,
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """
    Credentials login.

    Five consecutive failures lock the account for 30 minutes and email a
    password reset link. A successful login clears the failure counter.
    """
    user = await UserRepository(session).get_by_email(payload.email)
    if user is None or not user.password_hash:
        raise AuthenticationError("Invalid email or password")

    now = utc_now()
    if user.is_locked(now):
        raise AccountLockedError(
            "Account is temporarily locked due to too many failed login attempts. "
            "Please try again later or reset your password.",
            details={"lockedUntil": user.account_locked_until.isoformat()},
        )

    if user.account_status != AccountStatus.ACTIVE.value:
        raise AuthorizationError(STATUS_MESSAGES.get(user.account_status, "Your account is not active."))

    if not verify_password(payload.password, user.password_hash):
        user.failed_login_attempts += 1
        if user.failed_login_attempts >= MAX_FAILED_ATTEMPTS:
            token = generate_reset_token()
            user.account_locked_until = now + LOCK_DURATION
            user.password_reset_token = token
            user.password_reset_expires = now + RESET_TTL
            session.add(user)
            await session.commit()
            logger.warning(f"Account {user.id} locked after {user.failed_login_attempts} failed login attempts")
            await sender.send(user.email, email_templates.password_reset(_reset_url(token), user.name or "User"))
            raise AccountLockedError(
                "Account locked due to too many failed login attempts. "
                "A password reset link has been sent to your email.",
                details={"lockedUntil": user.account_locked_until.isoformat()},
            )
        session.add(user)
        await session.commit()
        raise AuthenticationError("Invalid email or password")

    user.failed_login_attempts = 0
    user.account_locked_until = None
    session.add(user)
    await session.commit()
    await session.refresh(user)

    return TokenResponse(access_token=create_access_token(user.id, user.role), user=UserRead.model_validate(user))


@router.get(
    "/me",
    response_model=UserRead,
    summary="Current User",
    description="Return the profile of the authenticated user.",
    responses={401: {"description": "Not authenticated"}},
)
async def me(user: CurrentUserDep) -> UserRead:
    return UserRead.model_validate(user)


@router.post(
    "/check-password-strength",
    response_model=PasswordStrengthResponse,
    summary="Check Password Strength",
    description="Evaluate a candidate password against the password policy.",
)
async def password_strength(payload: PasswordStrengthRequest) -> PasswordStrengthResponse:
    strength = check_password_strength(payload.password, payload.email)
    return PasswordStrengthResponse(
        score=strength.score,
        label=strength.label,
        is_valid=strength.is_valid,
        crack_time=strength.crack_time,
        warning=strength.feedback.warning,
        suggestions=strength.feedback.suggestions,
        requirements=strength.requirements.model_dump(),
        requirement_list=PASSWORD_REQUIREMENTS,
    )


@router.post(
    "/create-from-invitation",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Account From Invitation",
    description="Turn a guest booking invitation into a verified account linked to the booking.",
    responses={400: {"description": "Invalid or used invitation, weak password, or existing account"}},
)
async def create_from_invitation(
    payload: CreateFromInvitationRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """
    Create an account from a guest booking invitation.

    The invitation is valid for 7 days. The guest session is moved onto the
    new account and the email counts as verified.
    """
    stmt = select(ConsultationSession).where(ConsultationSession.account_creation_token == payload.token)
    booking = (await session.execute(stmt)).scalars().first()
    now = utc_now()
    if booking is None or booking.user_id is not None:
        raise ValidationError("Invalid or already used invitation token")
    if booking.account_creation_token_expires is None or booking.account_creation_token_expires < now:
        raise ValidationError("Invitation token has expired")
    if not booking.guest_email:
        raise ValidationError("Invalid or already used invitation token")

    email = booking.guest_email.lower()
    users = UserRepository(session)
    if await users.get_by_email(email) is not None:
        raise ValidationError("An account with this email already exists. Please sign in instead.")
    ensure_strong_password(check_password_strength(payload.password, email))

    user = await users.create(
        User(
            name=payload.name or booking.guest_name,
            email=email,
            password_hash=hash_password(payload.password),
            email_verified=now,
            free_consultation_used=booking.is_free_consultation,
            free_consultation_date=now if booking.is_free_consultation else None,
        )
    )

    booking.user_id = user.id
    booking.guest_email = None
    booking.guest_name = None
    booking.guest_phone = None
    booking.account_creation_token = None
    booking.account_creation_token_expires = None
    session.add(booking)
    await session.commit()
    await session.refresh(user)

    log_business_event("user.created_from_invitation", user_id=user.id, session_id=booking.id)
    return TokenResponse(access_token=create_access_token(user.id, user.role), user=UserRead.model_validate(user))
