"""
Support group I/O models for API requests and responses.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.enums import (
    AttendanceStatus,
    GroupMeetingType,
    GroupSessionStatus,
    GroupType,
    MemberStatus,
    ScheduleFrequency,
    WaitingListStatus,
)

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class MeetingScheduleSlot(BaseModel):
    """One recurring meeting slot of a group."""

    day: str = Field(description="Weekday name, e.g. Monday")
    time: str = Field(description="24h time formatted HH:MM")
    frequency: ScheduleFrequency = ScheduleFrequency.weekly

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not _TIME_PATTERN.match(value):
            raise ValueError("time must be formatted HH:MM")
        return value


class SupportGroupCreate(BaseModel):
    """Schema for creating a support group as a mentor."""

    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    group_type: GroupType = GroupType.other
    meeting_type: GroupMeetingType = GroupMeetingType.online
    max_participants: int = Field(default=20, ge=1, le=100)
    location: Optional[str] = None
    meeting_schedule: List[MeetingScheduleSlot] = Field(default_factory=list)
    group_rules: Optional[str] = None
    is_public: bool = True


class SupportGroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    group_type: Optional[GroupType] = None
    meeting_type: Optional[GroupMeetingType] = None
    max_participants: Optional[int] = Field(default=None, ge=1, le=100)
    location: Optional[str] = None
    meeting_schedule: Optional[List[MeetingScheduleSlot]] = None
    group_rules: Optional[str] = None
    is_public: Optional[bool] = None
    is_active: Optional[bool] = None


class SupportGroupRead(BaseModel):
    """Schema for reading a support group."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    group_type: GroupType
    meeting_type: GroupMeetingType
    max_participants: int
    current_participants: int
    location: Optional[str] = None
    meeting_schedule: List[MeetingScheduleSlot] = Field(default_factory=list)
    group_rules: Optional[str] = None
    is_public: bool
    is_active: bool
    room_url: Optional[str] = None
    mentor_id: str
    mentor_name: Optional[str] = None
    mentor_specialty: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class JoinEligibility(BaseModel):
    can_join: bool
    reason: Optional[str] = None
    meeting_url: Optional[str] = None


class GroupMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    user_id: str
    status: MemberStatus
    notes: Optional[str] = None
    joined_at: dt.datetime
    last_activity: Optional[dt.datetime] = None
    full_name: Optional[str] = None
    attendance_rate: float = 0.0


class GroupMemberUpdate(BaseModel):
    status: Optional[MemberStatus] = None
    notes: Optional[str] = None


class WaitingListApply(BaseModel):
    personal_message: Optional[str] = None


class WaitingListDecision(BaseModel):
    status: WaitingListStatus = Field(description="approved or rejected")

    @field_validator("status")
    @classmethod
    def _decision_only(cls, value: WaitingListStatus) -> WaitingListStatus:
        if value not in (WaitingListStatus.approved, WaitingListStatus.rejected):
            raise ValueError("status must be 'approved' or 'rejected'")
        return value


class WaitingListEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    user_id: str
    personal_message: Optional[str] = None
    status: WaitingListStatus
    priority_score: int
    applied_at: dt.datetime
    processed_at: Optional[dt.datetime] = None
    processed_by: Optional[str] = None


class SyncCountsResult(BaseModel):
    updated: int
    errors: int


class GroupSessionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    session_date: dt.date
    start_time: dt.time
    end_time: Optional[dt.time] = None
    notes: Optional[str] = None


class GroupSessionUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    session_date: Optional[dt.date] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    notes: Optional[str] = None
    recording_url: Optional[str] = None


class GroupSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    title: str
    description: Optional[str] = None
    session_date: dt.date
    start_time: dt.time
    end_time: Optional[dt.time] = None
    status: GroupSessionStatus
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    recording_url: Optional[str] = None
    created_by: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime
    attendance_count: int = 0
    total_members: int = 0
    attendance_rate: float = 0.0


class AttendanceMark(BaseModel):
    user_id: str
    status: AttendanceStatus
    notes: Optional[str] = None


class AttendanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    group_id: str
    user_id: str
    status: AttendanceStatus
    joined_at: Optional[dt.datetime] = None
    left_at: Optional[dt.datetime] = None
    duration_minutes: int
    notes: Optional[str] = None
    marked_by: Optional[str] = None
    created_at: dt.datetime


class AutoMarkResult(BaseModel):
    marked_absent: int


class RecentGroupActivity(BaseModel):
    new_members: int
    upcoming_sessions: int
    completed_sessions: int


class GroupAnalytics(BaseModel):
    group_id: str
    total_members: int
    active_members: int
    total_sessions: int
    average_attendance: float
    attendance_rate: float
    member_engagement: float
    recent_activity: RecentGroupActivity


class MemberAnalytics(BaseModel):
    group_id: str
    user_id: str
    attendance_rate: float
    sessions_attended: int
    total_sessions: int
    last_attendance: Optional[dt.datetime] = None
    engagement_score: float


class ResetSessionDataResult(BaseModel):
    attendance_deleted: int
    sessions_deleted: int
    groups_synced: int
