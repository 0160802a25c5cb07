"""
Group session and attendance entity models.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class GroupSessionBase(Base):
    """Base fields for group session entity."""

    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    session_date: dt.date = Field(index=True)
    start_time: dt.time
    end_time: Optional[dt.time] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    recording_url: Optional[str] = Field(default=None, max_length=1024)


class GroupSession(GroupSessionBase, table=True):
    """Entity for a scheduled meeting of a support group.

    Table: group_sessions
    """

    __tablename__ = "group_sessions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    group_id: str = Field(max_length=64, index=True, foreign_key="support_groups.id")
    status: str = Field(default="scheduled", max_length=16, index=True)
    meeting_link: Optional[str] = Field(default=None, max_length=1024)
    created_by: Optional[str] = Field(default=None, max_length=64)
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)

    def starts_at(self) -> dt.datetime:
        return dt.datetime.combine(self.session_date, self.start_time)

    def duration_minutes(self, default: int = 60) -> int:
        if self.end_time is None:
            return default
        start = dt.datetime.combine(self.session_date, self.start_time)
        end = dt.datetime.combine(self.session_date, self.end_time)
        minutes = int((end - start).total_seconds() // 60)
        return minutes if minutes > 0 else default

    def __repr__(self) -> str:
        return f"GroupSession(id={self.id}, group_id={self.group_id}, status={self.status})"


class SessionAttendance(Base, table=True):
    """Attendance of one member at one group session.

    Table: session_attendance
    """

    __tablename__ = "session_attendance"
    __table_args__ = (UniqueConstraint("session_id", "user_id", name="uq_session_attendance_session_user"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    session_id: str = Field(max_length=64, index=True, foreign_key="group_sessions.id")
    group_id: str = Field(max_length=64, index=True)
    user_id: str = Field(max_length=64, index=True)
    status: str = Field(default="present", max_length=16)
    joined_at: Optional[dt.datetime] = Field(default=None)
    left_at: Optional[dt.datetime] = Field(default=None)
    duration_minutes: int = Field(default=0, ge=0)
    notes: Optional[str] = Field(default=None)
    marked_by: Optional[str] = Field(default=None, max_length=64)
    created_at: dt.datetime = Field(default_factory=utc_now, index=True)
    updated_at: dt.datetime = Field(default_factory=utc_now)

    @property
    def attended(self) -> bool:
        return self.status in ("present", "late")
