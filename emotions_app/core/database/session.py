"""
Global database session and engine management.

This module manages the global AsyncEngine and async_sessionmaker instances
that are used throughout the application for database access.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from emotions_app.core.logging_config import get_logger
from emotions_app.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.
    """
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Initialize the database.

    Alembic migrations own the schema in deployed environments. Local runs can
    set ``EMOTIONS_APP_AUTO_CREATE_TABLES=true`` to create missing tables.
    """
    if not settings.auto_create_tables:
        logger.info("Skipping table creation, schema is managed by Alembic migrations")
        return
    await create_all(engine)
    logger.info("Database tables created from ORM metadata")
