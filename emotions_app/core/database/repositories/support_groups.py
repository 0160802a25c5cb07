"""
Support group repositories.

Data access for groups, memberships and the waiting list.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.support_groups import GroupMember, GroupWaitingListEntry, SupportGroup
from .base import QueryBuilder, SQLModelRepository


class SupportGroupRepository(SQLModelRepository[SupportGroup]):
    """Repository for support group data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SupportGroup)

    async def search(
        self,
        group_type: Optional[str] = None,
        meeting_type: Optional[str] = None,
        mentor_id: Optional[str] = None,
        active_only: bool = True,
        public_only: bool = False,
    ) -> List[SupportGroup]:
        stmt = select(SupportGroup).order_by(SupportGroup.created_at.desc())  # type: ignore
        stmt = QueryBuilder.apply_filters(
            stmt,
            SupportGroup,
            {"group_type": group_type, "meeting_type": meeting_type, "mentor_id": mentor_id},
        )
        if active_only:
            stmt = stmt.where(SupportGroup.is_active == True)  # noqa: E712
        if public_only:
            stmt = stmt.where(SupportGroup.is_public == True)  # noqa: E712
        return await self._all(stmt)

    async def get_many(self, group_ids: List[str]) -> List[SupportGroup]:
        if not group_ids:
            return []
        return await self._all(select(SupportGroup).where(SupportGroup.id.in_(group_ids)))  # type: ignore


class GroupMemberRepository(SQLModelRepository[GroupMember]):
    """Repository for support group membership rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GroupMember)

    async def get_membership(self, group_id: str, user_id: str) -> Optional[GroupMember]:
        return await self._first(
            select(GroupMember).where(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
        )

    async def list_for_group(self, group_id: str, status: Optional[str] = None) -> List[GroupMember]:
        stmt = select(GroupMember).where(GroupMember.group_id == group_id).order_by(GroupMember.joined_at)
        if status is not None:
            stmt = stmt.where(GroupMember.status == status)
        return await self._all(stmt)

    async def count_for_group(self, group_id: str, status: str = "active") -> int:
        stmt = select(func.count()).select_from(GroupMember).where(
            GroupMember.group_id == group_id, GroupMember.status == status
        )
        return int(await self.session.scalar(stmt) or 0)

    async def list_for_user(self, user_id: str, status: str = "active") -> List[GroupMember]:
        return await self._all(
            select(GroupMember).where(GroupMember.user_id == user_id, GroupMember.status == status)
        )


class GroupWaitingListRepository(SQLModelRepository[GroupWaitingListEntry]):
    """Repository for waiting list applications."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GroupWaitingListEntry)

    async def get_pending(self, group_id: str, user_id: str) -> Optional[GroupWaitingListEntry]:
        return await self._first(
            select(GroupWaitingListEntry).where(
                GroupWaitingListEntry.group_id == group_id,
                GroupWaitingListEntry.user_id == user_id,
                GroupWaitingListEntry.status == "waiting",
            )
        )

    async def list_waiting(self, group_id: str) -> List[GroupWaitingListEntry]:
        stmt = (
            select(GroupWaitingListEntry)
            .where(GroupWaitingListEntry.group_id == group_id, GroupWaitingListEntry.status == "waiting")
            .order_by(GroupWaitingListEntry.priority_score.desc(), GroupWaitingListEntry.applied_at)  # type: ignore
        )
        return await self._all(stmt)
