import re
from datetime import timedelta

import pytest

from diligence_labs.core.database import utc_now
from diligence_labs.core.database.entities.admins import AdminKey
from diligence_labs.server.services.admin_keys import AdminKeyService, generate_admin_key

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio

KEY_PATTERN = re.compile(r"^DL_ADMIN_[A-Z0-9]{8}_[A-Z0-9]{8}_[A-Z0-9]{8}$")


async def test_generated_key_format():
    keys = {generate_admin_key() for _ in range(20)}

    assert all(KEY_PATTERN.match(key) for key in keys)
    assert len(keys) == 20


class TestCreate:
    async def test_defaults(self, session, make_admin):
        creator = await make_admin(role="SUPER_ADMIN")

        admin_key = await AdminKeyService(session).create(creator.id)

        assert KEY_PATTERN.match(admin_key.key)
        assert admin_key.is_active
        assert admin_key.expires_at is None
        assert admin_key.max_usages is None
        assert admin_key.description.startswith("Generated on ")

    async def test_expiry_and_limit(self, session, make_admin):
        creator = await make_admin(role="SUPER_ADMIN")
        before = utc_now()

        service = AdminKeyService(session)
        admin_key = await service.create(creator.id, expires_in_hours=2, max_usages=3, description="ops")

        assert admin_key.max_usages == 3
        assert admin_key.description == "ops"
        assert before + timedelta(hours=2) <= admin_key.expires_at <= utc_now() + timedelta(hours=2)

    async def test_list_active_excludes_revoked(self, session, make_admin):
        creator = await make_admin(role="SUPER_ADMIN")
        service = AdminKeyService(session)
        kept = await service.create(creator.id)
        revoked = await service.create(creator.id)

        assert (await service.deactivate(revoked.id)).is_active is False
        assert [k.id for k in await service.list_active()] == [kept.id]
        assert await service.deactivate("missing") is None


class TestValidate:
    async def test_valid_key_counts_use(self, session):
        session.add(AdminKey(key="DL_ADMIN_AAAAAAAA_BBBBBBBB_CCCCCCCC", max_usages=2))
        await session.flush()

        result = await AdminKeyService(session).validate("DL_ADMIN_AAAAAAAA_BBBBBBBB_CCCCCCCC")

        assert result.valid
        assert result.key.usage_count == 1
        assert result.key.last_used_at is not None

    async def test_unknown_or_inactive(self, session):
        session.add(AdminKey(key="DL_ADMIN_OFF", is_active=False))
        await session.flush()
        service = AdminKeyService(session)

        assert await service.validate("nope") == (False, "Invalid or expired key", None)
        assert (await service.validate("DL_ADMIN_OFF")).reason == "Invalid or expired key"

    async def test_expired_key_is_deactivated(self, session):
        admin_key = AdminKey(key="DL_ADMIN_OLD", expires_at=utc_now() - timedelta(minutes=1))
        session.add(admin_key)
        await session.flush()

        result = await AdminKeyService(session).validate("DL_ADMIN_OLD")

        assert (result.valid, result.reason) == (False, "Key has expired")
        assert admin_key.is_active is False

    async def test_exhausted_key_is_deactivated(self, session):
        admin_key = AdminKey(key="DL_ADMIN_ONCE", max_usages=1)
        session.add(admin_key)
        await session.flush()
        service = AdminKeyService(session)

        assert (await service.validate("DL_ADMIN_ONCE")).valid
        result = await service.validate("DL_ADMIN_ONCE")

        assert (result.valid, result.reason) == (False, "Key usage limit exceeded")
        assert admin_key.is_active is False
        assert admin_key.usage_count == 1
