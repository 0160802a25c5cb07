"""
In-process periodic jobs.

The server starts the stale call cleanup loop from its lifespan:

    task = start_call_cleanup(interval_seconds)
    yield
    await stop_call_cleanup(task)
"""

import asyncio
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from emotions_app.core.database.repositories.bundle import build_repositories
from emotions_app.core.logging_config import get_logger

from .call_sessions import CallSessionService

logger = get_logger(__name__)


async def run_call_cleanup_once(session_maker: async_sessionmaker[AsyncSession], stale_after_minutes: int) -> int:
    """Disconnect stale call sessions using a fresh database session."""
    async with session_maker() as session:
        service = CallSessionService(build_repositories(session), stale_after_minutes=stale_after_minutes)
        return await service.cleanup_stale()


async def run_periodically(job: Callable[[], Awaitable[object]], interval_seconds: float, name: str) -> None:
    """Run ``job`` every ``interval_seconds`` until cancelled; failures are logged and retried next tick."""
    logger.info(f"Background job '{name}' started (interval={interval_seconds}s)")
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await job()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Background job '{name}' failed: {e}", exc_info=True)


def start_call_cleanup(
    session_maker: async_sessionmaker[AsyncSession], interval_seconds: int, stale_after_minutes: int
) -> Optional["asyncio.Task[None]"]:
    """Schedule the stale call cleanup loop; returns None when disabled (interval ``<= 0``)."""
    if interval_seconds <= 0:
        logger.info("Stale call cleanup loop disabled")
        return None
    return asyncio.create_task(
        run_periodically(
            lambda: run_call_cleanup_once(session_maker, stale_after_minutes),
            interval_seconds,
            "call-session-cleanup",
        )
    )


async def stop_call_cleanup(task: Optional["asyncio.Task[None]"]) -> None:
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    logger.info("Background job 'call-session-cleanup' stopped")
