"""
Admin Registration Key Endpoints.

Super admins issue and revoke registration keys; admins can list the keys
that are still active.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session
from diligence_labs.core.errors import NotFoundError
from diligence_labs.core.logging_config import get_logger
from diligence_labs.core.models.io.admin import AdminKeyCreate, AdminKeyList, AdminKeyRead
from diligence_labs.core.monitoring import log_business_event
from diligence_labs.server.services.admin_keys import AdminKeyService
from diligence_labs.server.services.deps import AdminDep, SuperAdminDep

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=AdminKeyRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Admin Key",
    description="Issue a registration key, optionally expiring or limited to a number of uses.",
    responses={403: {"description": "SUPER_ADMIN role required"}},
)
async def create_key(
    payload: AdminKeyCreate,
    admin: SuperAdminDep,
    session: AsyncSession = Depends(get_session),
) -> AdminKeyRead:
    admin_key = await AdminKeyService(session).create(
        created_by=admin.id,
        expires_in_hours=payload.expires_in_hours,
        max_usages=payload.max_usages,
        description=payload.description,
    )
    await session.commit()
    await session.refresh(admin_key)

    log_business_event("admin.key_created", key_id=admin_key.id, created_by=admin.id)
    return AdminKeyRead.model_validate(admin_key)


@router.get(
    "",
    response_model=AdminKeyList,
    summary="List Admin Keys",
    description="List the active registration keys, newest first.",
)
async def list_keys(admin: AdminDep, session: AsyncSession = Depends(get_session)) -> AdminKeyList:
    keys = await AdminKeyService(session).list_active()
    return AdminKeyList(keys=[AdminKeyRead.model_validate(k) for k in keys])


@router.delete(
    "/{key_id}",
    response_model=AdminKeyRead,
    summary="Deactivate Admin Key",
    description="Revoke a registration key.",
    responses={403: {"description": "SUPER_ADMIN role required"}, 404: {"description": "Key not found"}},
)
async def deactivate_key(
    key_id: str,
    admin: SuperAdminDep,
    session: AsyncSession = Depends(get_session),
) -> AdminKeyRead:
    admin_key = await AdminKeyService(session).deactivate(key_id)
    if admin_key is None:
        raise NotFoundError("Admin key")
    await session.commit()
    await session.refresh(admin_key)

    log_business_event("admin.key_deactivated", key_id=key_id, admin_id=admin.id)
    return AdminKeyRead.model_validate(admin_key)
