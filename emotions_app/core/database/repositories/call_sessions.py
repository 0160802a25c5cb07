"""
Call session and session event repositories.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.call_sessions import CallSession, SessionEvent
from .base import SQLModelRepository


class CallSessionRepository(SQLModelRepository[CallSession]):
    """Repository for live call connections."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CallSession)

    async def get_active(self, appointment_id: str, user_id: str) -> Optional[CallSession]:
        stmt = (
            select(CallSession)
            .where(
                CallSession.appointment_id == appointment_id,
                CallSession.user_id == user_id,
                CallSession.status == "active",
            )
            .order_by(CallSession.started_at.desc())  # type: ignore
        )
        return await self._first(stmt)

    async def list_active(self, appointment_id: str, user_id: Optional[str] = None) -> List[CallSession]:
        stmt = select(CallSession).where(
            CallSession.appointment_id == appointment_id, CallSession.status == "active"
        )
        if user_id is not None:
            stmt = stmt.where(CallSession.user_id == user_id)
        return await self._all(stmt)

    async def list_stale(self, heartbeat_before: datetime) -> List[CallSession]:
        return await self._all(
            select(CallSession).where(
                CallSession.status == "active", CallSession.last_heartbeat < heartbeat_before
            )
        )


class SessionEventRepository(SQLModelRepository[SessionEvent]):
    """Repository for call timeline events."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SessionEvent)

    async def latest(self, appointment_id: str, limit: int = 20) -> List[SessionEvent]:
        stmt = (
            select(SessionEvent)
            .where(SessionEvent.appointment_id == appointment_id)
            .order_by(SessionEvent.created_at.desc())  # type: ignore
            .limit(limit)
        )
        return await self._all(stmt)
