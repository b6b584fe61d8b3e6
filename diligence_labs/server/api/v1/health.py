"""
Health Check Endpoints.

This module provides basic system status endpoints (health, database
connectivity, version) used for monitoring and deployment verification.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from diligence_labs.core.database import get_session, ping
from diligence_labs.core.logging_config import get_logger

from ...core import constant

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return {"status": "ok"}


@router.get(
    "/health/db",
    summary="Database Health Check",
    description="Check that the database answers a trivial query.",
    response_description="Status object with the database state.",
    responses={503: {"description": "Database unreachable"}},
)
async def database_health_check(session: AsyncSession = Depends(get_session)):
    """
    Database health check endpoint.

    Runs ``SELECT 1`` against the application database.
    """
    try:
        await ping(session)
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "error", "database": "disconnected"})
    return {"status": "ok", "database": "connected"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    """
    Get API version.

    Returns the current semantic version of the API and supported schema version.
    """
    return {"version": constant.API_VERSION, "schema_version": constant.SCHEMA_VERSION}
