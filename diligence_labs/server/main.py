"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request tracing), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from diligence_labs.core.database import init_db
from diligence_labs.core.logging_config import get_logger, setup_logging
from diligence_labs.core.monitoring import initialize_logfire

from .api.v1 import (
    admin_assignments,
    admin_auth,
    admin_evaluations,
    admin_experts,
    admin_keys,
    admin_notifications,
    admin_projects,
    admin_reports,
    admin_sessions,
    admin_stats,
    admin_subscriptions,
    admin_team,
    admin_users,
    auth,
    contact,
    evaluations,
    expert_assignments,
    experts,
    guest,
    health,
    projects,
    reports,
    rewards,
    sessions,
    subscriptions,
    user_reputation,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates any missing tables on startup and turns on Logfire tracing when
    it is configured.
    """
    # Startup
    try:
        logger.info("Starting up Diligence Labs API...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    initialize_logfire(app)

    yield

    # Shutdown
    logger.info("Shutting down Diligence Labs API...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Diligence Labs API

    Backend services for the Diligence Labs blockchain advisory platform: consultation
    booking, report requests, subscriptions, and the expert project evaluation workflow
    with its admin back office.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)

API = constant.API_V1_STR

app.include_router(health.router, prefix=API, tags=["health"])

# User-facing
app.include_router(auth.router, prefix=f"{API}/auth", tags=["auth"])
app.include_router(sessions.router, prefix=f"{API}/sessions", tags=["sessions"])
app.include_router(guest.router, prefix=f"{API}/guest", tags=["guest"])
app.include_router(reports.router, prefix=f"{API}/reports", tags=["reports"])
app.include_router(subscriptions.router, prefix=f"{API}/subscriptions", tags=["subscriptions"])
app.include_router(subscriptions.plans_router, prefix=f"{API}/subscription-plans", tags=["subscriptions"])
app.include_router(contact.router, prefix=f"{API}/contact", tags=["contact"])

# Expert workflow
app.include_router(experts.router, prefix=f"{API}/experts", tags=["experts"])
app.include_router(projects.router, prefix=f"{API}/projects", tags=["projects"])
app.include_router(expert_assignments.router, prefix=f"{API}/expert", tags=["expert assignments"])
app.include_router(evaluations.router, prefix=f"{API}/evaluations", tags=["evaluations"])
app.include_router(rewards.router, prefix=f"{API}/rewards", tags=["rewards"])
app.include_router(user_reputation.router, prefix=f"{API}/user-reputation", tags=["reputation"])

# Admin back office
app.include_router(admin_auth.router, prefix=f"{API}/admin/auth", tags=["admin"])
app.include_router(admin_keys.router, prefix=f"{API}/admin/keys", tags=["admin"])
app.include_router(admin_team.router, prefix=f"{API}/admin/team", tags=["admin"])
app.include_router(admin_assignments.router, prefix=f"{API}/admin/assignments", tags=["admin"])
app.include_router(admin_users.router, prefix=f"{API}/admin/users", tags=["admin"])
app.include_router(admin_sessions.router, prefix=f"{API}/admin/sessions", tags=["admin"])
app.include_router(admin_reports.router, prefix=f"{API}/admin/reports", tags=["admin"])
app.include_router(admin_subscriptions.router, prefix=f"{API}/admin/subscriptions", tags=["admin"])
app.include_router(admin_experts.router, prefix=f"{API}/admin/expert-applications", tags=["admin"])
app.include_router(admin_evaluations.router, prefix=f"{API}/admin/evaluations", tags=["admin"])
app.include_router(admin_projects.router, prefix=f"{API}/admin/projects", tags=["admin"])
app.include_router(admin_notifications.router, prefix=f"{API}/admin/notifications", tags=["admin"])
app.include_router(admin_stats.router, prefix=f"{API}/admin/stats", tags=["admin"])
