"""
Wellbeing repositories: mood entries, stress assessments and derived metrics.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.wellbeing import MoodEntry, StressAssessment, UserAssessmentMetrics
from .base import QueryBuilder, SQLModelRepository


class MoodEntryRepository(SQLModelRepository[MoodEntry]):
    """Repository for mood journal entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, MoodEntry)

    async def list_for_user(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[MoodEntry]:
        stmt = (
            select(MoodEntry)
            .where(MoodEntry.user_id == user_id)
            .order_by(MoodEntry.created_at.desc())  # type: ignore
        )
        if start is not None:
            stmt = stmt.where(MoodEntry.created_at >= start)
        if end is not None:
            stmt = stmt.where(MoodEntry.created_at <= end)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        return await self._all(stmt)

    async def latest_for_user(self, user_id: str, count: int) -> List[MoodEntry]:
        return await self.list_for_user(user_id, limit=count)


class StressAssessmentRepository(SQLModelRepository[StressAssessment]):
    """Repository for stress assessments."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, StressAssessment)

    async def list_for_user(self, user_id: str, since: Optional[datetime] = None) -> List[StressAssessment]:
        stmt = (
            select(StressAssessment)
            .where(StressAssessment.user_id == user_id)
            .order_by(StressAssessment.created_at.desc())  # type: ignore
        )
        if since is not None:
            stmt = stmt.where(StressAssessment.created_at >= since)
        return await self._all(stmt)


class UserAssessmentMetricsRepository(SQLModelRepository[UserAssessmentMetrics]):
    """Repository for per-user assessment metrics (primary key is the user id)."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserAssessmentMetrics)
