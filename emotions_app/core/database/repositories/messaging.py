"""
Messaging repositories.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.messaging import Conversation, ConversationParticipant, Message
from .base import QueryBuilder, SQLModelRepository


class ConversationRepository(SQLModelRepository[Conversation]):
    """Repository for conversation data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Conversation)

    async def get_by_pair(self, patient_id: str, mentor_id: str) -> Optional[Conversation]:
        return await self._first(
            select(Conversation).where(Conversation.patient_id == patient_id, Conversation.mentor_id == mentor_id)
        )

    async def get_by_appointment(self, appointment_id: str) -> Optional[Conversation]:
        return await self._first(select(Conversation).where(Conversation.appointment_id == appointment_id))

    async def list_for_user(self, user_id: str) -> List[Conversation]:
        stmt = (
            select(Conversation)
            .where(or_(Conversation.patient_id == user_id, Conversation.mentor_id == user_id))
            .order_by(
                func.coalesce(Conversation.last_message_at, Conversation.created_at).desc()
            )
        )
        return await self._all(stmt)


class ConversationParticipantRepository(SQLModelRepository[ConversationParticipant]):
    """Repository for per-user conversation read markers."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ConversationParticipant)

    async def get_participant(self, conversation_id: str, user_id: str) -> Optional[ConversationParticipant]:
        return await self._first(
            select(ConversationParticipant).where(
                ConversationParticipant.conversation_id == conversation_id,
                ConversationParticipant.user_id == user_id,
            )
        )


class MessageRepository(SQLModelRepository[Message]):
    """Repository for chat messages. Soft-deleted messages are never returned."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Message)

    async def list_for_conversation(
        self, conversation_id: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Message]:
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id, Message.deleted_at.is_(None))  # type: ignore
            .order_by(Message.created_at)
        )
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        return await self._all(stmt)

    async def last_message(self, conversation_id: str) -> Optional[Message]:
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id, Message.deleted_at.is_(None))  # type: ignore
            .order_by(Message.created_at.desc())  # type: ignore
        )
        return await self._first(stmt)

    async def count_unread(self, conversation_id: str, reader_id: str) -> int:
        stmt = select(func.count()).select_from(Message).where(
            Message.conversation_id == conversation_id,
            Message.sender_id != reader_id,
            Message.read_at.is_(None),  # type: ignore
            Message.deleted_at.is_(None),  # type: ignore
        )
        return int(await self.session.scalar(stmt) or 0)

    async def mark_read(self, conversation_id: str, reader_id: str, read_at: datetime) -> int:
        """Stamp every unread message from the other party; returns how many were updated."""
        stmt = (
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.sender_id != reader_id,
                Message.read_at.is_(None),  # type: ignore
                Message.deleted_at.is_(None),  # type: ignore
            )
            .values(read_at=read_at)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0
