"""
Call session I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.enums import CallSessionStatus, EventInitiator, SessionEventType


class CallSessionStart(BaseModel):
    appointment_id: str
    device_id: Optional[str] = Field(default=None, max_length=128)
    is_audio_only: bool = False


class CallSessionEnd(BaseModel):
    appointment_id: str


class CallSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    appointment_id: str
    user_id: str
    device_id: Optional[str] = None
    is_audio_only: bool
    status: CallSessionStatus
    started_at: datetime
    ended_at: Optional[datetime] = None
    last_heartbeat: datetime


class SessionEventCreate(BaseModel):
    appointment_id: str
    event_type: SessionEventType
    message: Optional[str] = None


class SessionEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    appointment_id: str
    event_type: SessionEventType
    initiated_by: EventInitiator
    message: Optional[str] = None
    created_at: datetime


class EndedSessions(BaseModel):
    ended: int


class CleanupResult(BaseModel):
    disconnected: int
