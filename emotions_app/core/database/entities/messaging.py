"""
Messaging entity models.

A conversation links exactly one patient with one mood mentor, optionally
bound to the appointment that started it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Conversation(Base, table=True):
    """Entity for patient/mentor conversations.

    Table: conversations
    """

    __tablename__ = "conversations"
    __table_args__ = (UniqueConstraint("patient_id", "mentor_id", name="uq_conversations_patient_mentor"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    patient_id: str = Field(max_length=64, index=True)
    mentor_id: str = Field(max_length=64, index=True)
    appointment_id: Optional[str] = Field(default=None, max_length=64, index=True)
    last_message_at: Optional[datetime] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def involves(self, user_id: str) -> bool:
        return user_id in (self.patient_id, self.mentor_id)

    def other_party(self, user_id: str) -> str:
        return self.mentor_id if user_id == self.patient_id else self.patient_id


class ConversationParticipant(Base, table=True):
    """Per-user read marker of a conversation.

    Table: conversation_participants
    """

    __tablename__ = "conversation_participants"
    __table_args__ = (
        UniqueConstraint("conversation_id", "user_id", name="uq_conversation_participants_conversation_user"),
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    conversation_id: str = Field(max_length=64, index=True, foreign_key="conversations.id")
    user_id: str = Field(max_length=64, index=True)
    last_read_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class Message(Base, table=True):
    """A single chat message.

    Table: messages
    """

    __tablename__ = "messages"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    conversation_id: str = Field(max_length=64, index=True, foreign_key="conversations.id")
    sender_id: str = Field(max_length=64, index=True)
    content: str
    created_at: datetime = Field(default_factory=utc_now, index=True)
    read_at: Optional[datetime] = Field(default=None)
    deleted_at: Optional[datetime] = Field(default=None)
