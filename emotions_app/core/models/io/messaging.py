"""
Messaging I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_MESSAGE_LENGTH = 5000


class ConversationCreate(BaseModel):
    """Open (or fetch) the conversation with another participant."""

    other_user_id: str = Field(description="User id of the mentor (for patients) or the patient (for mentors)")
    appointment_id: Optional[str] = None


class ConversationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    mentor_id: str
    appointment_id: Optional[str] = None
    last_message_at: Optional[datetime] = None
    created_at: datetime


class ConversationSummary(ConversationRead):
    """Conversation as listed in the inbox."""

    other_user_id: str
    other_user_name: Optional[str] = None
    last_message: Optional[str] = None
    unread_count: int = 0


class MessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)


class MessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: datetime
    read_at: Optional[datetime] = None


class MarkReadResult(BaseModel):
    marked: int
