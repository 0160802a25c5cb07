"""
Group session and attendance repositories.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.group_sessions import GroupSession, SessionAttendance
from ..entities.support_groups import GroupMember
from .base import SQLModelRepository

ATTENDED_STATUSES = ("present", "late")


class GroupSessionRepository(SQLModelRepository[GroupSession]):
    """Repository for group session data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GroupSession)

    async def list_for_group(self, group_id: str, statuses: Optional[Iterable[str]] = None) -> List[GroupSession]:
        stmt = (
            select(GroupSession)
            .where(GroupSession.group_id == group_id)
            .order_by(GroupSession.session_date.desc(), GroupSession.start_time.desc())  # type: ignore
        )
        if statuses is not None:
            stmt = stmt.where(GroupSession.status.in_(list(statuses)))  # type: ignore
        return await self._all(stmt)

    async def for_group_on(self, group_id: str, day: dt.date) -> List[GroupSession]:
        stmt = (
            select(GroupSession)
            .where(GroupSession.group_id == group_id, GroupSession.session_date == day)
            .order_by(GroupSession.start_time)
        )
        return await self._all(stmt)

    async def count_upcoming(self, group_id: str, today: dt.date) -> int:
        stmt = select(func.count()).select_from(GroupSession).where(
            GroupSession.group_id == group_id,
            GroupSession.status == "scheduled",
            GroupSession.session_date >= today,
        )
        return int(await self.session.scalar(stmt) or 0)


class SessionAttendanceRepository(SQLModelRepository[SessionAttendance]):
    """Repository for session attendance rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SessionAttendance)

    async def get_record(self, session_id: str, user_id: str) -> Optional[SessionAttendance]:
        return await self._first(
            select(SessionAttendance).where(
                SessionAttendance.session_id == session_id, SessionAttendance.user_id == user_id
            )
        )

    async def list_for_session(self, session_id: str) -> List[SessionAttendance]:
        return await self._all(
            select(SessionAttendance)
            .where(SessionAttendance.session_id == session_id)
            .order_by(SessionAttendance.created_at)
        )

    async def list_for_group(self, group_id: str, user_id: Optional[str] = None) -> List[SessionAttendance]:
        stmt = (
            select(SessionAttendance)
            .where(SessionAttendance.group_id == group_id)
            .order_by(SessionAttendance.created_at.desc())  # type: ignore
        )
        if user_id is not None:
            stmt = stmt.where(SessionAttendance.user_id == user_id)
        return await self._all(stmt)

    async def count_attended(self, session_id: str, member_status: Optional[str] = None) -> int:
        """Count present or late rows, optionally only for members in ``member_status``."""
        stmt = select(func.count()).select_from(SessionAttendance).where(
            SessionAttendance.session_id == session_id,
            SessionAttendance.status.in_(ATTENDED_STATUSES),  # type: ignore
        )
        if member_status is not None:
            stmt = stmt.join(
                GroupMember,
                (GroupMember.group_id == SessionAttendance.group_id)
                & (GroupMember.user_id == SessionAttendance.user_id),
            ).where(GroupMember.status == member_status)
        return int(await self.session.scalar(stmt) or 0)
