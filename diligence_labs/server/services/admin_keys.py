"""
Admin Registration Key Management.

Super admins issue registration keys that let new admins sign up. Keys can
expire and can be limited to a number of uses; a key that is found expired
or exhausted during validation is deactivated.
"""

import secrets
import string
from datetime import timedelta
from typing import List, NamedTuple, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from diligence_labs.core.database import utc_now
from diligence_labs.core.database.entities.admins import AdminKey
from diligence_labs.core.logging_config import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "DL_ADMIN"
KEY_ALPHABET = string.ascii_uppercase + string.digits
KEY_GROUPS = 3
KEY_GROUP_LENGTH = 8


class KeyValidation(NamedTuple):
    valid: bool
    reason: Optional[str] = None
    key: Optional[AdminKey] = None


def generate_admin_key() -> str:
    """Random key formatted as ``DL_ADMIN_XXXXXXXX_XXXXXXXX_XXXXXXXX``."""
    groups = [
        "".join(secrets.choice(KEY_ALPHABET) for _ in range(KEY_GROUP_LENGTH)) for _ in range(KEY_GROUPS)
    ]
    return "_".join([KEY_PREFIX, *groups])


class AdminKeyService:
    """Create, list, revoke and validate admin registration keys."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        created_by: str,
        expires_in_hours: Optional[int] = None,
        max_usages: Optional[int] = None,
        description: Optional[str] = None,
    ) -> AdminKey:
        now = utc_now()
        admin_key = AdminKey(
            key=generate_admin_key(),
            created_by=created_by,
            expires_at=now + timedelta(hours=expires_in_hours) if expires_in_hours else None,
            max_usages=max_usages,
            description=description or f"Generated on {now:%Y-%m-%d %H:%M} UTC",
        )
        self.session.add(admin_key)
        await self.session.flush()
        logger.info(f"Admin key {admin_key.id} created by {created_by}")
        return admin_key

    async def list_active(self) -> List[AdminKey]:
        stmt = select(AdminKey).where(AdminKey.is_active == True).order_by(col(AdminKey.created_at).desc())
        return list((await self.session.execute(stmt)).scalars().all())

    async def deactivate(self, key_id: str) -> Optional[AdminKey]:
        admin_key = await self.session.get(AdminKey, key_id)
        if admin_key is None:
            return None
        admin_key.is_active = False
        self.session.add(admin_key)
        await self.session.flush()
        return admin_key

    async def validate(self, key: str) -> KeyValidation:
        """
        Validate a key presented on admin signup and count the use.

        Args:
            key: The raw key string

        Returns:
            KeyValidation, with the reason when the key is rejected
        """
        admin_key = (await self.session.execute(select(AdminKey).where(AdminKey.key == key))).scalars().first()
        if admin_key is None or not admin_key.is_active:
            return KeyValidation(False, "Invalid or expired key")

        now = utc_now()
        if admin_key.expires_at is not None and admin_key.expires_at < now:
            admin_key.is_active = False
            self.session.add(admin_key)
            await self.session.flush()
            return KeyValidation(False, "Key has expired")

        if admin_key.max_usages is not None and admin_key.usage_count >= admin_key.max_usages:
            admin_key.is_active = False
            self.session.add(admin_key)
            await self.session.flush()
            return KeyValidation(False, "Key usage limit exceeded")

        admin_key.usage_count += 1
        admin_key.last_used_at = now
        self.session.add(admin_key)
        await self.session.flush()
        return KeyValidation(True, key=admin_key)
