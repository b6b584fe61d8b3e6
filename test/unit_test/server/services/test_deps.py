"""Unit tests for server services dependencies.

Tests verify the authentication dependencies resolve callers from bearer
tokens and gate admin routes on the role hierarchy.
"""

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from diligence_labs.core.database.entities.admins import AdminUser
from diligence_labs.core.errors import AuthenticationError, AuthorizationError
from diligence_labs.core.models.domain.enums import AdminRole
from diligence_labs.core.security import create_access_token, create_admin_token
from diligence_labs.server.services.deps import (
    Caller,
    ModeratorDep,
    get_current_admin,
    get_current_user,
    get_optional_user,
    get_user_or_admin,
    get_verified_expert,
    require_admin,
    role_level,
)


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def _admin_bearer(admin: AdminUser) -> HTTPAuthorizationCredentials:
    return _bearer(create_admin_token(admin.id, admin.email, admin.name, admin.role))


class TestRoleHierarchy:
    def test_levels(self):
        assert role_level("MODERATOR") < role_level("ADMIN") < role_level("SUPER_ADMIN")

    def test_unknown_role_has_no_level(self):
        assert role_level("INTERN") == 0

    def test_moderator_dep_is_annotated(self):
        # ModeratorDep should be Annotated[AdminUser, Depends(...)]
        assert hasattr(ModeratorDep, "__metadata__")
        assert hasattr(ModeratorDep.__metadata__[0], "dependency")

    def test_caller_is_admin(self):
        assert Caller(admin=AdminUser(email="a@example.com", name="A", password_hash="x")).is_admin is True
        assert Caller().is_admin is False


@pytest.mark.asyncio
class TestUserDependencies:
    async def test_no_credentials(self, session):
        assert await get_optional_user(None, session) is None

        with pytest.raises(AuthenticationError):
            await get_current_user(None)

    async def test_resolves_user(self, session, make_user):
        user = await make_user()

        resolved = await get_optional_user(_bearer(create_access_token(user.id, user.role)), session)

        assert resolved.id == user.id

    async def test_deleted_user(self, session):
        with pytest.raises(AuthenticationError, match="User not found"):
            await get_optional_user(_bearer(create_access_token("missing", "CLIENT")), session)

    async def test_verified_expert(self, session, make_expert):
        user, profile = await make_expert()

        assert await get_verified_expert(user, session) == (user, profile)

    async def test_pending_expert_rejected(self, session, make_expert):
        user, _ = await make_expert(verification_status="PENDING")

        with pytest.raises(AuthorizationError, match="Verified expert profile required"):
            await get_verified_expert(user, session)


@pytest.mark.asyncio
class TestAdminDependencies:
    async def test_resolves_admin(self, session, make_admin):
        admin = await make_admin()

        assert (await get_current_admin(_admin_bearer(admin), session)).id == admin.id

    async def test_user_token_rejected(self, session, make_user):
        user = await make_user()

        with pytest.raises(AuthenticationError):
            await get_current_admin(_bearer(create_access_token(user.id, user.role)), session)

    async def test_deactivated_admin(self, session, make_admin):
        admin = await make_admin(is_active=False)

        with pytest.raises(AuthenticationError, match="deactivated"):
            await get_current_admin(_admin_bearer(admin), session)

    async def test_require_admin(self, make_admin):
        moderator = await make_admin(role="MODERATOR")
        admin_only = require_admin(AdminRole.ADMIN)

        with pytest.raises(AuthorizationError, match="ADMIN role required"):
            await admin_only(moderator)
        assert await require_admin(AdminRole.MODERATOR)(moderator) is moderator

    async def test_caller_accepts_either_token(self, session, make_user, make_admin):
        user = await make_user()
        admin = await make_admin()

        as_user = await get_user_or_admin(_bearer(create_access_token(user.id, user.role)), session)
        as_admin = await get_user_or_admin(_admin_bearer(admin), session)

        assert as_user.user.id == user.id
        assert as_user.is_admin is False
        assert as_admin.admin.id == admin.id
