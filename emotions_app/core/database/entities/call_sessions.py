"""
Live call tracking entity models.

``CallSession`` rows represent one device of one participant connected to an
appointment call; ``SessionEvent`` rows form the join/leave timeline.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class CallSession(Base, table=True):
    """Entity for active call connections.

    Table: active_sessions
    """

    __tablename__ = "active_sessions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    appointment_id: str = Field(max_length=64, index=True)
    user_id: str = Field(max_length=64, index=True)
    device_id: Optional[str] = Field(default=None, max_length=128)
    is_audio_only: bool = Field(default=False)
    status: str = Field(default="active", max_length=16, index=True)
    started_at: datetime = Field(default_factory=utc_now)
    ended_at: Optional[datetime] = Field(default=None)
    last_heartbeat: datetime = Field(default_factory=utc_now, index=True)


class SessionEvent(Base, table=True):
    """Entity for call timeline events.

    Table: session_events
    """

    __tablename__ = "session_events"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    appointment_id: str = Field(max_length=64, index=True)
    event_type: str = Field(max_length=32)
    initiated_by: str = Field(max_length=16)
    message: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)
