"""Test configuration for database unit tests.

Provides an in-memory SQLite engine with every table created, a session
bound to it and the repository bundle built on that session.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from emotions_app.core.database import Base, create_sessionmaker
from emotions_app.core.database import entities  # noqa: F401
from emotions_app.core.database.repositories import RepositoryBundle, build_repositories


@pytest.fixture(scope="function")
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create in-memory SQLite session for testing."""
    async with create_sessionmaker(in_memory_engine)() as session:
        yield session


@pytest.fixture(scope="function")
def repos(in_memory_session: AsyncSession) -> RepositoryBundle:
    return build_repositories(in_memory_session)
