"""
Profile repositories.

Data access for patient and mood mentor profiles, looked up by the
identity-provider user id rather than the row id.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.profiles import MoodMentorProfile, PatientProfile
from .base import QueryBuilder, SQLModelRepository


class PatientProfileRepository(SQLModelRepository[PatientProfile]):
    """Repository for patient profile data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PatientProfile)

    async def get_by_user_id(self, user_id: str) -> Optional[PatientProfile]:
        return await self._first(select(PatientProfile).where(PatientProfile.user_id == user_id))

    async def get_by_email(self, email: str) -> Optional[PatientProfile]:
        return await self._first(select(PatientProfile).where(PatientProfile.email == email))

    async def get_many_by_user_ids(self, user_ids: List[str]) -> Dict[str, PatientProfile]:
        if not user_ids:
            return {}
        rows = await self._all(select(PatientProfile).where(PatientProfile.user_id.in_(user_ids)))  # type: ignore
        return {row.user_id: row for row in rows}

    async def gender_distribution(self) -> Dict[Optional[str], int]:
        return await self.count_by("gender")

    async def created_since(self, since: datetime) -> List[datetime]:
        result = await self.session.execute(
            select(PatientProfile.created_at).where(PatientProfile.created_at >= since)
        )
        return list(result.scalars().all())


class MoodMentorProfileRepository(SQLModelRepository[MoodMentorProfile]):
    """Repository for mood mentor profile data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, MoodMentorProfile)

    async def get_by_user_id(self, user_id: str) -> Optional[MoodMentorProfile]:
        return await self._first(select(MoodMentorProfile).where(MoodMentorProfile.user_id == user_id))

    async def get_by_email(self, email: str) -> Optional[MoodMentorProfile]:
        return await self._first(select(MoodMentorProfile).where(MoodMentorProfile.email == email))

    async def get_many_by_user_ids(self, user_ids: List[str]) -> Dict[str, MoodMentorProfile]:
        if not user_ids:
            return {}
        rows = await self._all(
            select(MoodMentorProfile).where(MoodMentorProfile.user_id.in_(user_ids))  # type: ignore
        )
        return {row.user_id: row for row in rows}

    async def search(
        self,
        specialty: Optional[str] = None,
        active_only: bool = True,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[MoodMentorProfile]:
        """List mentors filtered by specialty and a free-text search on name or bio."""
        stmt = select(MoodMentorProfile).order_by(MoodMentorProfile.full_name)
        if active_only:
            stmt = stmt.where(MoodMentorProfile.is_active == True)  # noqa: E712
        if specialty:
            stmt = stmt.where(func.lower(MoodMentorProfile.specialty) == specialty.lower())
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(MoodMentorProfile.full_name).like(pattern),
                    func.lower(func.coalesce(MoodMentorProfile.bio, "")).like(pattern),
                )
            )
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        return await self._all(stmt)

    async def created_since(self, since: datetime) -> List[datetime]:
        result = await self.session.execute(
            select(MoodMentorProfile.created_at).where(MoodMentorProfile.created_at >= since)
        )
        return list(result.scalars().all())
