from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select

from diligence_labs.core.database import utc_now
from diligence_labs.core.database.entities.consultations import ConsultationSession
from diligence_labs.core.database.entities.users import User
from diligence_labs.core.security import verify_password

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

NEW_PASSWORD = "Qu13t!Meadow7"


async def _reload(session, user: User) -> User:
    await session.refresh(user)
    return user


class TestRegister:
    async def test_creates_unverified_user_and_sends_link(
        self, client: AsyncClient, session, email_sender, strong_password
    ):
        response = await client.post(
            "/api/v1/auth/register",
            json={"name": "Ann Lee", "email": "Ann@Example.com", "password": strong_password},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User created successfully. Please check your email to verify your account."
        assert body["user"]["email"] == "ann@example.com"
        assert body["user"]["emailVerified"] is None
        assert body["emailVerificationSent"] is True
        assert email_sender.recipients() == ["ann@example.com"]
        assert "/verify-email?token=" in email_sender.sent[0][1].text

        user = (await session.execute(select(User))).scalars().one()
        assert verify_password(strong_password, user.password_hash)
        assert user.email_verification_expires > utc_now() + timedelta(hours=23)

    async def test_duplicate_email(self, client: AsyncClient, make_user, strong_password):
        await make_user(email="ann@example.com")

        response = await client.post(
            "/api/v1/auth/register",
            json={"name": "Ann Lee", "email": "ANN@example.com", "password": strong_password},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "User with this email already exists"

    async def test_weak_password_reports_strength(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={"name": "Ann Lee", "email": "ann@example.com", "password": "abcdefgh"},
        )

        body = response.json()
        assert response.status_code == 400
        assert body["detail"] == "Password does not meet security requirements"
        assert "has_uppercase" in body["passwordStrength"]["failedRequirements"]

    async def test_invalid_body(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/register", json={"name": "A", "email": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestVerifyEmail:
    async def test_valid_token(self, client: AsyncClient, session, make_user):
        user = await make_user(
            email_verification_token="verify-me", email_verification_expires=utc_now() + timedelta(hours=1)
        )

        response = await client.get("/api/v1/auth/verify-email", params={"token": "verify-me"})

        assert response.status_code == 200
        user = await _reload(session, user)
        assert user.email_verified is not None
        assert user.email_verification_token is None

    async def test_expired_token(self, client: AsyncClient, make_user):
        await make_user(email_verification_token="old", email_verification_expires=utc_now() - timedelta(hours=1))

        response = await client.get("/api/v1/auth/verify-email", params={"token": "old"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired verification token"

    async def test_resend(self, client: AsyncClient, session, make_user, email_sender):
        user = await make_user()

        response = await client.post("/api/v1/auth/verify-email", json={"email": user.email})

        assert response.status_code == 200
        assert email_sender.recipients() == [user.email]
        assert (await _reload(session, user)).email_verification_token is not None

    async def test_resend_unknown_and_verified(self, client: AsyncClient, make_user):
        await make_user(email="done@example.com", email_verified=utc_now())

        missing = await client.post("/api/v1/auth/verify-email", json={"email": "nobody@example.com"})
        verified = await client.post("/api/v1/auth/verify-email", json={"email": "done@example.com"})

        assert missing.status_code == 404
        assert verified.status_code == 400
        assert verified.json()["detail"] == "Email is already verified"

    async def test_resend_delivery_failure(self, client: AsyncClient, make_user, email_sender):
        user = await make_user()
        email_sender.fail = True

        response = await client.post("/api/v1/auth/verify-email", json={"email": user.email})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to send verification email"


class TestPasswordRecovery:
    async def test_forgot_password_is_generic(self, client: AsyncClient, make_user, email_sender):
        await make_user(email="ann@example.com")

        known = await client.post("/api/v1/auth/forgot-password", json={"email": "ann@example.com"})
        unknown = await client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert email_sender.recipients() == ["ann@example.com"]

    async def test_reset_password_clears_lockout(self, client: AsyncClient, session, make_user):
        user = await make_user(
            password_reset_token="reset-token",
            password_reset_expires=utc_now() + timedelta(minutes=30),
            failed_login_attempts=5,
            account_locked_until=utc_now() + timedelta(minutes=30),
        )

        response = await client.post(
            "/api/v1/auth/reset-password", json={"token": "reset-token", "password": NEW_PASSWORD}
        )

        assert response.status_code == 200
        user = await _reload(session, user)
        assert verify_password(NEW_PASSWORD, user.password_hash)
        assert user.password_reset_token is None
        assert user.failed_login_attempts == 0
        assert user.account_locked_until is None

    async def test_reset_with_bad_token(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/reset-password", json={"token": "nope", "password": NEW_PASSWORD})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired reset token"


class TestLogin:
    async def test_success(self, client: AsyncClient, make_user, strong_password):
        user = await make_user(failed_login_attempts=2)

        response = await client.post("/api/v1/auth/login", json={"email": user.email, "password": strong_password})

        body = response.json()
        assert response.status_code == 200
        assert body["tokenType"] == "bearer"
        assert body["accessToken"]
        assert body["user"]["id"] == user.id

    async def test_wrong_password_counts_failure(self, client: AsyncClient, session, make_user):
        user = await make_user()

        response = await client.post("/api/v1/auth/login", json={"email": user.email, "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"
        assert (await _reload(session, user)).failed_login_attempts == 1

    async def test_unknown_email(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "x"})

        assert response.status_code == 401

    async def test_fifth_failure_locks_and_emails_reset(self, client: AsyncClient, session, make_user, email_sender):
        user = await make_user(failed_login_attempts=4)

        response = await client.post("/api/v1/auth/login", json={"email": user.email, "password": "wrong"})

        assert response.status_code == 423
        assert "lockedUntil" in response.json()
        user = await _reload(session, user)
        assert user.account_locked_until > utc_now() + timedelta(minutes=29)
        assert user.password_reset_token is not None
        assert email_sender.recipients() == [user.email]

    async def test_locked_account_rejects_correct_password(self, client: AsyncClient, make_user, strong_password):
        user = await make_user(account_locked_until=utc_now() + timedelta(minutes=10))

        response = await client.post("/api/v1/auth/login", json={"email": user.email, "password": strong_password})

        assert response.status_code == 423
        assert response.json()["code"] == "ACCOUNT_LOCKED"

    async def test_expired_lock_allows_login(self, client: AsyncClient, make_user, strong_password):
        user = await make_user(account_locked_until=utc_now() - timedelta(minutes=1), failed_login_attempts=5)

        response = await client.post("/api/v1/auth/login", json={"email": user.email, "password": strong_password})

        assert response.status_code == 200

    @pytest.mark.parametrize("account_status", ["SUSPENDED", "RESTRICTED", "DISABLED"])
    async def test_inactive_account(self, client: AsyncClient, make_user, strong_password, account_status):
        user = await make_user(account_status=account_status)

        response = await client.post("/api/v1/auth/login", json={"email": user.email, "password": strong_password})

        assert response.status_code == 403
        assert account_status.lower() in response.json()["detail"]


class TestMe:
    async def test_returns_profile(self, client: AsyncClient, make_user, user_headers):
        user = await make_user()

        response = await client.get("/api/v1/auth/me", headers=user_headers(user))

        assert response.status_code == 200
        assert response.json()["email"] == user.email

    async def test_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401

    async def test_rejects_garbage_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"


async def test_check_password_strength(client: AsyncClient, strong_password):
    response = await client.post("/api/v1/auth/check-password-strength", json={"password": strong_password})

    body = response.json()
    assert response.status_code == 200
    assert body["isValid"] is True
    assert body["label"] == "Strong"
    assert body["requirements"]["min_length"] is True
    assert len(body["requirementList"]) == 7


class TestCreateFromInvitation:
    async def _invitation(self, session, token="invite", expires_in=timedelta(days=7), email="guest@example.com"):
        booking = ConsultationSession(
            consultation_type="STRATEGIC_ADVISORY",
            guest_email=email,
            guest_name="Guest Person",
            is_free_consultation=True,
            account_creation_token=token,
            account_creation_token_expires=utc_now() + expires_in,
        )
        session.add(booking)
        await session.commit()
        return booking

    async def test_creates_verified_account_and_claims_booking(self, client: AsyncClient, session, strong_password):
        booking = await self._invitation(session)

        response = await client.post(
            "/api/v1/auth/create-from-invitation", json={"token": "invite", "password": strong_password}
        )

        body = response.json()
        assert response.status_code == 201
        assert body["user"]["email"] == "guest@example.com"
        assert body["user"]["name"] == "Guest Person"
        assert body["user"]["emailVerified"] is not None

        await session.refresh(booking)
        assert booking.user_id == body["user"]["id"]
        assert booking.guest_email is None
        assert booking.account_creation_token is None
        user = await session.get(User, booking.user_id)
        assert user.free_consultation_used is True

    async def test_unknown_token(self, client: AsyncClient, strong_password):
        response = await client.post(
            "/api/v1/auth/create-from-invitation", json={"token": "nope", "password": strong_password}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or already used invitation token"

    async def test_expired_token(self, client: AsyncClient, session, strong_password):
        await self._invitation(session, expires_in=-timedelta(minutes=1))

        response = await client.post(
            "/api/v1/auth/create-from-invitation", json={"token": "invite", "password": strong_password}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invitation token has expired"

    async def test_existing_account(self, client: AsyncClient, session, make_user, strong_password):
        await make_user(email="guest@example.com")
        await self._invitation(session)

        response = await client.post(
            "/api/v1/auth/create-from-invitation", json={"token": "invite", "password": strong_password}
        )

        assert response.status_code == 400
        assert "already exists" in response.json()["detail"]
