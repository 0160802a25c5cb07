"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request tracing), registers exception handlers and includes all API routers.
It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from emotions_app.core.database.session import async_session_maker, init_db
from emotions_app.core.logging_config import get_logger, setup_logging
from emotions_app.core.monitoring import initialize_logfire

from .api.v1 import (
    admin,
    appointments,
    call_sessions,
    group_sessions,
    health,
    messaging,
    notifications,
    profiles,
    reviews,
    support_groups,
    wellbeing,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware
from .services.background import start_call_cleanup, stop_call_cleanup

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Initializes the database on startup and runs the stale call cleanup loop
    until shutdown.
    """
    # Startup
    try:
        logger.info("Starting up Emotions App Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    policy = settings.policy
    cleanup_task = start_call_cleanup(
        async_session_maker,
        interval_seconds=policy.call_cleanup_interval_seconds,
        stale_after_minutes=policy.call_stale_after_minutes,
    )

    yield

    # Shutdown
    logger.info("Shutting down Emotions App Server...")
    await stop_call_cleanup(cleanup_task)


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Emotions App API

    Backend services for the Emotions App mental-health platform: patient and mood mentor
    profiles, appointments, support groups, messaging, mood and stress tracking, mentor
    reviews and admin analytics.
    """,
    version=constant.VERSION,
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
initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(profiles.router, prefix=f"{constant.API_V1_STR}/profiles")
app.include_router(appointments.router, prefix=f"{constant.API_V1_STR}/appointments")
app.include_router(support_groups.router, prefix=f"{constant.API_V1_STR}/support-groups")
app.include_router(group_sessions.router, prefix=constant.API_V1_STR)
app.include_router(reviews.router, prefix=f"{constant.API_V1_STR}/reviews")
app.include_router(messaging.router, prefix=f"{constant.API_V1_STR}/messaging")
app.include_router(notifications.router, prefix=f"{constant.API_V1_STR}/notifications")
app.include_router(wellbeing.router, prefix=f"{constant.API_V1_STR}/wellbeing")
app.include_router(call_sessions.router, prefix=f"{constant.API_V1_STR}/call-sessions")
app.include_router(admin.router, prefix=f"{constant.API_V1_STR}/admin")
